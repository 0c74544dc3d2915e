"""Dimension-aware normalization of cosine distances, and theoretical references.

The standard deviation of the cosine distance between random unit vectors shrinks
like ``1/sqrt(dimension)``. Stretching the deviation from the mean (1.0) by
``sqrt(dimension)`` gives distributions with comparable spread across dimensions,
while keeping the mean where it was.
"""

import math
from warnings import warn

import numpy as np
from scipy.stats import norm

from cosine_concentration.config import check_dimension

LOW_DIMENSION_CUTOFF = 3
LOW_DIMENSION_ALPHA = 1.5


def normalization_alpha(dimension: int) -> float:
    """Extra stretch applied in very low dimensions.

    At ``dimension <= 3`` the distances are narrower than the asymptotic
    ``1/sqrt(dimension)`` suggests.

    >>> normalization_alpha(3), normalization_alpha(4)
    (1.5, 1.0)
    """
    return LOW_DIMENSION_ALPHA if dimension <= LOW_DIMENSION_CUTOFF else 1.0


def normalize_distance(distance, dimension: int):
    """
    Rescales a cosine distance so its spread does not depend on the dimension.

    ``(distance - 1) * sqrt(dimension) * alpha + 1``, where ``alpha`` is given by
    `normalization_alpha`. Works on scalars and numpy arrays alike.

    :param distance: Cosine distance(s), usually in [0, 2]
    :param dimension: Dimension of the vectors the distance was measured between
    :return: The normalized distance(s)

    >>> normalize_distance(1.0, 512)
    1.0
    >>> round(normalize_distance(2.0, 3), 3)
    3.598
    >>> normalize_distance(2.0, 4)
    3.0
    >>> normalize_distance(np.array([0.5, 1.0, 1.5]), 16)
    array([-1.,  1.,  3.])
    """
    check_dimension(dimension)
    return (distance - 1.0) * math.sqrt(dimension) * normalization_alpha(dimension) + 1.0


def expected_dot_product_variance(dimension: int) -> float:
    """
    Computes the expected variance of the dot product between two random unit vectors
    in a `dimension`-dimensional space.

    >>> expected_dot_product_variance(10)
    0.1
    >>> expected_dot_product_variance(100)
    0.01
    """
    check_dimension(dimension)
    return 1 / dimension


def theoretical_std(dimension: int) -> float:
    """Standard deviation of the cosine distance between random unit vectors.

    >>> theoretical_std(4)
    0.5
    """
    return math.sqrt(expected_dot_product_variance(dimension))


def theoretical_density(x, dimension: int, normalized: bool = False):
    """Normal approximation of the density of (normalized) cosine distances.

    Original distances are approximated by ``N(1, 1/sqrt(dimension))``. Pushing
    that through `normalize_distance` gives ``N(1, alpha)``.
    Only a reference curve to draw next to empirical histograms: in low dimensions
    the true distribution is far from normal.

    >>> round(float(theoretical_density(1.0, 100)), 4)
    3.9894
    >>> round(float(theoretical_density(1.0, 100, normalized=True)), 4)
    0.3989
    """
    check_dimension(dimension)
    if dimension <= LOW_DIMENSION_CUTOFF:
        warn(
            f"The normal approximation is poor in dimension {dimension}: don't "
            "compare it too closely with sampled histograms."
        )
    if normalized:
        scale = normalization_alpha(dimension)
    else:
        scale = theoretical_std(dimension)
    return norm.pdf(np.asarray(x, dtype=float), loc=1.0, scale=scale)
