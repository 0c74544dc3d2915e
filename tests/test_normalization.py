"""Tests for the dimension-aware normalization and the theoretical references."""

import math

import numpy as np
from scipy.integrate import trapezoid
import pytest

from cosine_concentration.normalization import (
    expected_dot_product_variance,
    normalization_alpha,
    normalize_distance,
    theoretical_density,
    theoretical_std,
)


class TestNormalizeDistance:
    """Test the rescaling formula."""

    @pytest.mark.parametrize("dimension", [1, 2, 3, 4, 5, 64, 2048])
    def test_mean_is_a_fixed_point(self, dimension):
        """A distance of 1 stays 1 in every dimension."""
        assert normalize_distance(1.0, dimension) == 1.0

    def test_alpha_cutoff(self):
        """Dimensions up to 3 get the 1.5 stretch, 4 and above don't."""
        assert normalize_distance(2.0, 3) == pytest.approx(3.598, abs=1e-3)
        assert normalize_distance(2.0, 3) == pytest.approx(1 + math.sqrt(3) * 1.5)
        assert normalize_distance(2.0, 4) == 3.0
        assert normalization_alpha(1) == 1.5
        assert normalization_alpha(4) == 1.0

    def test_symmetric_around_mean(self):
        """Deviations below and above 1 are stretched the same way."""
        low, high = normalize_distance(np.array([0.9, 1.1]), 100)
        assert low == pytest.approx(0.0)
        assert high == pytest.approx(2.0)

    def test_array_input(self):
        """Arrays are normalized element-wise."""
        d = np.array([0.0, 0.5, 1.0, 2.0])
        expected = [(x - 1) * 4 + 1 for x in d]
        np.testing.assert_allclose(normalize_distance(d, 16), expected)

    def test_invalid_dimension(self):
        with pytest.raises(ValueError):
            normalize_distance(1.0, 0)


class TestTheory:
    """Test the theoretical reference values."""

    def test_dot_product_variance(self):
        assert expected_dot_product_variance(10) == pytest.approx(0.1)

    def test_theoretical_std(self):
        assert theoretical_std(100) == pytest.approx(0.1)
        assert theoretical_std(128) == pytest.approx(0.0884, abs=1e-4)

    def test_density_integrates_to_one(self):
        """The reference density is a probability density."""
        x = np.linspace(-5, 7, 20_001)
        for normalized in (False, True):
            density = theoretical_density(x, 64, normalized=normalized)
            assert trapezoid(density, x) == pytest.approx(1.0, abs=1e-6)

    def test_normalized_density_has_unit_scale(self):
        """Normalized distances have spread alpha, whatever the dimension."""
        peak = 1 / math.sqrt(2 * math.pi)
        assert theoretical_density(1.0, 16, normalized=True) == pytest.approx(peak)
        assert theoretical_density(1.0, 1024, normalized=True) == pytest.approx(peak)

    def test_low_dimension_warning(self):
        """The normal approximation is flagged as poor in low dimensions."""
        with pytest.warns(UserWarning, match="normal approximation"):
            theoretical_density(1.0, 2)
