"""Streaming mean and standard deviation (Welford's online algorithm).

Keeping the running sum of squared deviations from the current mean, instead of a
sum and a sum of squares, avoids the catastrophic cancellation that the naive
formula suffers from when the spread is tiny compared to the mean (cosine
distances in high dimensions are all very close to 1).
"""

import math
from dataclasses import dataclass
from typing import Iterable, NamedTuple

from cosine_concentration.errors import InsufficientSamples


class Summary(NamedTuple):
    mean: float
    std: float


@dataclass
class RunningStats:
    """Running count, mean and sum of squared deviations of a stream of values.

    >>> stats = RunningStats()
    >>> stats.update_many([1, 3])
    >>> stats.finalize()
    Summary(mean=2.0, std=1.0)
    >>> stats.count
    2
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0

    def update(self, value: float) -> None:
        """Fold one observation in."""
        value = float(value)
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        self.m2 += delta * (value - self.mean)

    def update_many(self, values: Iterable[float]) -> None:
        """Fold observations in, one at a time, in order.

        Equivalent to calling `update` on each value, so the way a stream is
        chunked never changes the result.
        """
        for value in values:
            self.update(value)

    @property
    def variance(self) -> float:
        """Population variance (``m2 / count``)."""
        if self.count == 0:
            raise InsufficientSamples("No observations to compute a variance from")
        return self.m2 / self.count

    def finalize(self) -> Summary:
        """Mean and population standard deviation of everything folded in so far.

        The population (not sample) standard deviation is used so values compare
        directly with the theoretical ``1/sqrt(dimension)``.
        """
        if self.count == 0:
            raise InsufficientSamples(
                "Cannot summarize statistics of zero observations"
            )
        return Summary(mean=self.mean, std=math.sqrt(self.variance))
