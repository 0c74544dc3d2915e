"""Errors raised by the concentration simulation engine.

None of these are retried by the engine: a failed run produces no result, and
the message is meant to be shown to a user as the reason there is no data.
"""


class ConcentrationError(Exception):
    """Base class for all errors raised by ``cosine_concentration``."""


class DimensionMismatch(ConcentrationError, ValueError):
    """Distance requested between vectors of different lengths."""

    def __init__(self, left_shape, right_shape):
        self.left_shape = tuple(left_shape)
        self.right_shape = tuple(right_shape)
        super().__init__(
            f"Cannot compare vectors of shape {self.left_shape} "
            f"and {self.right_shape}"
        )


class InvalidSampleSize(ConcentrationError, ValueError):
    """A sample-size strategy asked for a non-positive number of samples."""

    def __init__(self, dimension, sample_size):
        self.dimension = dimension
        self.sample_size = sample_size
        super().__init__(
            f"Sample size for dimension {dimension} must be a positive integer, "
            f"got {sample_size!r}"
        )


class InsufficientSamples(ConcentrationError, ValueError):
    """Statistics were finalized before any observation was folded in."""


class Cancelled(ConcentrationError, RuntimeError):
    """A simulation run was aborted through its cancellation event."""


class SimulationTimeout(Cancelled):
    """A simulation run exceeded its wall-clock timeout."""
