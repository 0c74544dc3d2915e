"""Tests for the density histogram builder."""

import numpy as np
import pytest

from cosine_concentration.config import NORMALIZED_VIEW, ORIGINAL_VIEW, HistogramView
from cosine_concentration.histogram import HistogramBin, build_histogram, total_mass


class TestBuildHistogram:
    """Test binning and density normalization."""

    def test_integrates_to_one(self):
        """Densities integrate to 1 when no value is dropped."""
        values = np.random.default_rng(0).uniform(0, 2, 10_000)
        bins = build_histogram(values, 0.0, 2.0, 40)
        assert len(bins) == 40
        assert total_mass(bins, 0.05) == pytest.approx(1.0)

    def test_bin_centers(self):
        """Bins are reported by their center, left to right."""
        bins = build_histogram([0.5], -2.0, 4.0, 40)
        assert bins[0].x == pytest.approx(-2.0 + 0.075)
        assert bins[-1].x == pytest.approx(4.0 - 0.075)
        assert all(isinstance(b, HistogramBin) for b in bins)

    def test_out_of_domain_values_are_dropped(self):
        """Values outside [min, max) are dropped but still count in the total."""
        bins = build_histogram([-0.5, 0.25, 0.75, 1.0, 3.0], 0.0, 1.0, 2)
        # two of five values fall inside, each bin holds one of them
        assert [b.density for b in bins] == pytest.approx([0.4, 0.4])
        assert total_mass(bins, 0.5) == pytest.approx(0.4)

    def test_domain_edges(self):
        """domain_min is inside the first bin, domain_max is outside the last."""
        bins = build_histogram([0.0, 2.0], 0.0, 2.0, 4)
        assert bins[0].density == pytest.approx(1 / (2 * 0.5))
        assert sum(b.density for b in bins[1:]) == 0.0

    def test_value_just_below_max_stays_in_last_bin(self):
        """Rounding can't push a value that is inside the domain out of it."""
        value = np.nextafter(0.3, 0.0)
        bins = build_histogram([value], 0.0, 0.3, 3)
        assert bins[-1].density > 0

    def test_density_values(self):
        """density = count / (total * bin_width)."""
        bins = build_histogram([0.1, 0.2, 0.3, 1.5], 0.0, 2.0, 4)
        assert [b.density for b in bins] == pytest.approx([1.5, 0.0, 0.0, 0.5])

    def test_empty_input(self):
        """No values, no density."""
        bins = build_histogram([], 0.0, 1.0, 5)
        assert [b.density for b in bins] == [0.0] * 5

    def test_deterministic(self):
        values = np.random.default_rng(3).normal(1, 0.2, 1_000)
        assert build_histogram(values, 0, 2, 40) == build_histogram(values, 0, 2, 40)

    @pytest.mark.parametrize(
        "domain_min, domain_max, bin_count",
        [(0.0, 1.0, 0), (0.0, 1.0, -2), (1.0, 1.0, 10), (2.0, 0.0, 10), (0.0, 1.0, 2.5)],
    )
    def test_invalid_parameters(self, domain_min, domain_max, bin_count):
        with pytest.raises(ValueError):
            build_histogram([0.5], domain_min, domain_max, bin_count)


class TestHistogramViews:
    """Test the default display views."""

    def test_default_views(self):
        assert (ORIGINAL_VIEW.domain_min, ORIGINAL_VIEW.domain_max) == (0.0, 2.0)
        assert (NORMALIZED_VIEW.domain_min, NORMALIZED_VIEW.domain_max) == (-2.0, 4.0)
        assert ORIGINAL_VIEW.bin_count == NORMALIZED_VIEW.bin_count == 40

    def test_bin_width(self):
        assert HistogramView(-1.0, 3.0, 8).bin_width == 0.5
