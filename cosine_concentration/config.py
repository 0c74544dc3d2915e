"""Configuration for concentration simulations.

Defaults for the dimensions to sweep, how many samples to draw per dimension,
the batch size used to hand control back to the host between chunks of work,
and the histogram views used to display original and normalized distances.
"""

from dataclasses import dataclass, field
from numbers import Integral
from typing import Callable, Mapping, Tuple, Union

DFLT_DIMENSIONS = (2, 4, 8, 16, 32, 64, 128, 256, 512, 1024, 2048)
DFLT_BATCH_SIZE = 100

SampleSizeStrategy = Callable[[int], int]
SampleSizePolicy = Union[SampleSizeStrategy, Mapping[int, int], int]


def tiered_sample_size(dimension: int) -> int:
    """Number of samples to draw for ``dimension``.

    Larger dimensions need more samples for a stable variance estimate.

    >>> tiered_sample_size(32), tiered_sample_size(33), tiered_sample_size(257)
    (10000, 20000, 50000)
    """
    if dimension <= 32:
        return 10_000
    elif dimension <= 256:
        return 20_000
    return 50_000


def as_sample_size_strategy(policy: SampleSizePolicy) -> SampleSizeStrategy:
    """Make a ``dimension -> sample count`` function out of ``policy``.

    ``policy`` can be a function, a ``{dimension: count}`` mapping or a single
    count used for every dimension. Dimensions missing from a mapping get a
    count of ``None``, which the simulation rejects.

    >>> as_sample_size_strategy(500)(1024)
    500
    >>> as_sample_size_strategy({2: 10, 4: 20})(4)
    20
    >>> as_sample_size_strategy({2: 10})(8) is None
    True
    """
    if isinstance(policy, Integral) and not isinstance(policy, bool):
        n = int(policy)
        return lambda dimension: n
    if isinstance(policy, Mapping):
        return policy.get
    if callable(policy):
        return policy
    raise TypeError(
        f"A sample size policy must be a callable, a mapping or an int, "
        f"not {type(policy).__name__}"
    )


@dataclass(frozen=True)
class HistogramView:
    """Domain and resolution of a density histogram display."""

    domain_min: float
    domain_max: float
    bin_count: int = 40

    @property
    def bin_width(self) -> float:
        return (self.domain_max - self.domain_min) / self.bin_count


ORIGINAL_VIEW = HistogramView(0.0, 2.0, 40)
NORMALIZED_VIEW = HistogramView(-2.0, 4.0, 40)


def is_positive_int(x) -> bool:
    return isinstance(x, Integral) and not isinstance(x, bool) and x > 0


def check_dimension(dimension) -> int:
    """The dimension as an ``int``, or ``ValueError`` if it isn't a positive integer.

    >>> check_dimension(3)
    3
    >>> check_dimension(2.5)
    Traceback (most recent call last):
      ...
    ValueError: The dimension must be a positive integer, got 2.5
    """
    if not is_positive_int(dimension):
        raise ValueError(f"The dimension must be a positive integer, got {dimension!r}")
    return int(dimension)


@dataclass
class SimulationConfig:
    """What a simulation run sweeps and how it schedules its work.

    ``batch_size`` only controls how often the run hands control back to its
    host (progress events, cancellation checks, async yields). It never
    changes the statistics.
    """

    dimensions: Tuple[int, ...] = DFLT_DIMENSIONS
    sample_size: SampleSizePolicy = field(default=tiered_sample_size)
    batch_size: int = DFLT_BATCH_SIZE

    def __post_init__(self):
        self.dimensions = tuple(self.dimensions)
        self.validate()

    def validate(self) -> None:
        for dim in self.dimensions:
            if not is_positive_int(dim):
                raise ValueError(f"Dimensions must be positive integers, got {dim!r}")
        if len(set(self.dimensions)) != len(self.dimensions):
            raise ValueError(f"Dimensions must be unique: {self.dimensions}")
        if not is_positive_int(self.batch_size):
            raise ValueError(
                f"The batch size must be a positive integer, got {self.batch_size!r}"
            )
        as_sample_size_strategy(self.sample_size)  # raises TypeError if invalid

    @property
    def sample_size_strategy(self) -> SampleSizeStrategy:
        return as_sample_size_strategy(self.sample_size)

    @classmethod
    def for_testing(cls) -> "SimulationConfig":
        """Small, quick sweep for tests and demos."""
        return cls(dimensions=(2, 3, 8, 32), sample_size=2_000, batch_size=250)
