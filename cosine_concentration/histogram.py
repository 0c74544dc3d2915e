"""Density histograms of distance samples."""

from typing import Iterable, List, NamedTuple

import numpy as np


class HistogramBin(NamedTuple):
    x: float  # bin center
    density: float


def build_histogram(
    values: Iterable[float], domain_min: float, domain_max: float, bin_count: int
) -> List[HistogramBin]:
    """
    Bins ``values`` into a density histogram over ``[domain_min, domain_max)``.

    Values outside the domain are dropped: display domains are often chosen
    narrower than the full range of the values, for resolution. They still count
    in the total, so densities integrate to the fraction of values inside the
    domain (1.0 when none are dropped).

    Args:
        values: The samples to bin.
        domain_min: Left edge of the first bin (included).
        domain_max: Right edge of the last bin (excluded).
        bin_count: Number of bins.

    Returns:
        list of HistogramBin, one per bin, from left to right.

    >>> bins = build_histogram([0.1, 0.2, 0.7, 5.0], 0, 1, 2)
    >>> [(float(b.x), float(b.density)) for b in bins]
    [(0.25, 1.0), (0.75, 0.5)]
    """
    if int(bin_count) != bin_count or bin_count <= 0:
        raise ValueError(f"bin_count must be a positive integer, got {bin_count!r}")
    if not domain_max > domain_min:
        raise ValueError(
            f"domain_max ({domain_max}) must be larger than domain_min ({domain_min})"
        )
    bin_count = int(bin_count)
    values = np.asarray(values, dtype=float).ravel()
    bin_width = (domain_max - domain_min) / bin_count
    centers = domain_min + (np.arange(bin_count) + 0.5) * bin_width

    if values.size == 0:
        densities = np.zeros(bin_count)
    else:
        inside = values[(values >= domain_min) & (values < domain_max)]
        idx = np.floor((inside - domain_min) / bin_width).astype(int)
        # a value just below domain_max can round up to bin_count
        idx = np.minimum(idx, bin_count - 1)
        counts = np.bincount(idx, minlength=bin_count)
        densities = counts / (values.size * bin_width)

    return [HistogramBin(float(x), float(d)) for x, d in zip(centers, densities)]


def total_mass(bins: List[HistogramBin], bin_width: float) -> float:
    """The integral of a histogram's density over its domain.

    >>> round(total_mass(build_histogram([0.1, 0.2, 0.7], 0, 1, 4), 0.25), 9)
    1.0
    """
    return float(sum(b.density for b in bins) * bin_width)
