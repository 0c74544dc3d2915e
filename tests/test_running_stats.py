"""Tests for the streaming mean/std accumulator."""

import numpy as np
import pytest

from cosine_concentration.errors import InsufficientSamples
from cosine_concentration.running_stats import RunningStats, Summary


class TestRunningStats:
    """Test Welford's online mean and variance."""

    def test_matches_numpy_population_std(self):
        """Mean and population std (ddof=0) agree with numpy."""
        values = np.random.default_rng(0).normal(3.0, 2.0, 5_000)
        stats = RunningStats()
        stats.update_many(values)
        summary = stats.finalize()
        assert summary.mean == pytest.approx(np.mean(values), rel=1e-12)
        assert summary.std == pytest.approx(np.std(values, ddof=0), rel=1e-10)

    def test_single_observation(self):
        """One observation has zero spread."""
        stats = RunningStats()
        stats.update(0.7)
        assert stats.finalize() == Summary(mean=0.7, std=0.0)

    def test_no_observations(self):
        """Finalizing an empty accumulator is an error."""
        stats = RunningStats()
        with pytest.raises(InsufficientSamples):
            stats.finalize()
        with pytest.raises(InsufficientSamples):
            stats.variance

    def test_chunking_does_not_matter(self):
        """Folding values in one go or in chunks gives identical results."""
        values = np.random.default_rng(1).random(1_000)
        whole, chunked = RunningStats(), RunningStats()
        whole.update_many(values)
        for start in range(0, len(values), 37):
            chunked.update_many(values[start:start + 37])
        assert whole.finalize() == chunked.finalize()
        assert whole.count == chunked.count == 1_000

    def test_stable_with_large_offset(self):
        """A tiny spread around a huge mean is not lost to cancellation."""
        values = 1e9 + np.array([4.0, 7.0, 13.0, 16.0])
        stats = RunningStats()
        stats.update_many(values)
        summary = stats.finalize()
        assert summary.mean == pytest.approx(1e9 + 10.0)
        assert summary.std == pytest.approx(np.sqrt(22.5), rel=1e-9)

    def test_concentrated_distances(self):
        """Distances clustered near 1 with a small spread are measured exactly."""
        values = 1.0 + 1e-4 * np.random.default_rng(2).standard_normal(10_000)
        stats = RunningStats()
        stats.update_many(values)
        assert stats.finalize().std == pytest.approx(np.std(values), rel=1e-8)
