"""Random unit vectors and the cosine distances between them."""

# -------------------------------------------------------------------------------------
# Sampling uniformly on the unit hypersphere
#
# A vector of i.i.d. standard normal coordinates, divided by its norm, is uniformly
# distributed on the sphere. The normals are made from uniform draws (Box-Muller) so
# that any source of uniform floats can drive the sampler.

from typing import Optional, Union

import numpy as np

from cosine_concentration.config import check_dimension
from cosine_concentration.errors import DimensionMismatch

RandomSource = Optional[Union[int, np.random.SeedSequence, np.random.Generator]]


def as_generator(rng: RandomSource = None) -> np.random.Generator:
    """Get a ``numpy.random.Generator`` from a seed, a generator, or ``None``.

    ``None`` gives a fresh, unseeded generator. A generator is returned as is, so
    its state keeps advancing across calls.

    >>> g = np.random.default_rng(3)
    >>> as_generator(g) is g
    True
    """
    return np.random.default_rng(rng)


def box_muller(u1: np.ndarray, u2: np.ndarray) -> np.ndarray:
    """Standard normal variates from two arrays of uniform(0, 1) draws.

    ``u1`` must not contain zeros (the logarithm is undefined there).

    >>> z = box_muller(np.array([np.exp(-0.5), 1.0]), np.array([0.0, 0.3]))
    >>> np.allclose(z, [1.0, 0.0])
    True
    """
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


class _UniformStream:
    """Serves uniform draws in the order the generator produced them.

    Starts from draws already taken from ``rng``, and asks ``rng`` for more once
    those are used up.
    """

    def __init__(self, rng: np.random.Generator, drawn: np.ndarray):
        self.rng = rng
        self._drawn = drawn.reshape(-1)
        self._pos = 0

    def take(self, n: int) -> np.ndarray:
        available = self._drawn.size - self._pos
        if n <= available:
            out = self._drawn[self._pos : self._pos + n].copy()
            self._pos += n
            return out
        out = np.concatenate([self._drawn[self._pos :], self.rng.random(n - available)])
        self._drawn, self._pos = self._drawn[:0], 0
        return out


def _unit_row(stream: _UniformStream, dimension: int) -> np.ndarray:
    # u1 block, u2 block, then any u1 redraws, then (rarely) a whole new vector
    while True:
        u = stream.take(2 * dimension)
        u1, u2 = u[:dimension], u[dimension:]
        zeros = u1 == 0.0
        while zeros.any():
            u1[zeros] = stream.take(int(zeros.sum()))
            zeros = u1 == 0.0
        row = box_muller(u1, u2)
        row_norm = np.linalg.norm(row)
        if np.isfinite(row_norm) and row_norm > 0:
            return row / row_norm


def random_unit_vectors(
    dimension: int, num_vectors: int = 100, rng: RandomSource = None
) -> np.ndarray:
    """
    Generates `num_vectors` random unit vectors in `dimension`-dimensional space.

    Vector ``i`` uses the random stream exactly as the ``i``-th of ``num_vectors``
    calls to `random_unit_vector` would, redraws included, so the batch size never
    changes which vectors are drawn.

    :param dimension: Dimension of the space
    :param num_vectors: Number of vectors to generate
    :param rng: Seed or ``numpy.random.Generator`` to draw from (fresh entropy if None)
    :return: A (num_vectors, dimension) numpy array of unit vectors

    >>> vectors = random_unit_vectors(5, 3, rng=0)
    >>> vectors.shape
    (3, 5)
    >>> np.allclose(np.linalg.norm(vectors, axis=1), 1.0)
    True
    """
    dimension = check_dimension(dimension)
    rng = as_generator(rng)
    u = rng.random((num_vectors, 2, dimension))
    u1, u2 = u[:, 0, :], u[:, 1, :]
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        vectors = box_muller(u1, u2)
        norms = np.linalg.norm(vectors, axis=1)
        vectors = vectors / norms[:, np.newaxis]
    usable = np.isfinite(norms) & (norms > 0) & ~(u1 == 0.0).any(axis=1)
    if not usable.all():
        # Redraws must come out of the stream right after the row that needs them,
        # so every row from the first bad one on is redone one at a time.
        first_bad = int(np.argmin(usable))
        stream = _UniformStream(rng, u[first_bad:])
        for i in range(first_bad, num_vectors):
            vectors[i] = _unit_row(stream, dimension)
    return vectors


def random_unit_vector(dimension: int, rng: RandomSource = None) -> np.ndarray:
    """A single random unit vector of length ``dimension``.

    >>> v = random_unit_vector(1000, rng=42)
    >>> bool(abs(np.linalg.norm(v) - 1) < 1e-9)
    True
    """
    return random_unit_vectors(dimension, 1, rng)[0]


# -------------------------------------------------------------------------------------
# Cosine distance
#
# Both inputs are unit vectors, so the dot product is the cosine similarity. This is
# the only place distances are forced into [0, 2].


def cosine_distance(a, b) -> float:
    """Cosine distance ``1 - a.b`` between two unit vectors, clamped to [0, 2].

    >>> cosine_distance([1.0, 0.0], [0.0, 1.0])
    1.0
    >>> cosine_distance([1.0, 0.0], [-1.0, 0.0])
    2.0
    """
    a, b = np.asarray(a, dtype=float), np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise DimensionMismatch(a.shape, b.shape)
    return float(np.clip(1.0 - np.dot(a, b), 0.0, 2.0))


def paired_cosine_distances(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Row-wise cosine distances between two stacks of unit vectors.

    Row ``i`` of the output is ``cosine_distance(a[i], b[i])``.

    >>> paired_cosine_distances(np.eye(2), np.array([[1.0, 0.0], [1.0, 0.0]]))
    array([0., 1.])
    """
    a, b = np.asarray(a, dtype=float), np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise DimensionMismatch(a.shape, b.shape)
    dots = np.einsum('ij,ij->i', a, b)
    return np.clip(1.0 - dots, 0.0, 2.0)
