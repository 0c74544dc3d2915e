"""Monte Carlo simulation of the concentration of cosine distances.

For every dimension of a sweep, draw pairs of random unit vectors, measure their
cosine distance, normalize it, and keep both running statistics and the raw samples.
The result is an immutable snapshot: a record of summary statistics per dimension,
plus the samples, so that histograms can be rebuilt for any subset of dimensions
without sampling again.

Work is done in batches. Between two batches the run hands control back to its host
(progress callback, cancellation check, and an ``await`` in the async flavor).
Batching is only about scheduling: with a seeded generator, any batch size draws
the same vectors and produces the same statistics.
"""

import asyncio
import logging
import time
from collections.abc import Sequence as SequenceABC
from dataclasses import asdict, dataclass, field, fields
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    Generator,
    Iterable,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
)

import numpy as np
import pandas as pd

from cosine_concentration.config import (
    DFLT_BATCH_SIZE,
    DFLT_DIMENSIONS,
    NORMALIZED_VIEW,
    ORIGINAL_VIEW,
    HistogramView,
    SampleSizePolicy,
    SimulationConfig,
    is_positive_int,
    tiered_sample_size,
)
from cosine_concentration.errors import Cancelled, InvalidSampleSize, SimulationTimeout
from cosine_concentration.histogram import HistogramBin, build_histogram
from cosine_concentration.normalization import normalize_distance, theoretical_std
from cosine_concentration.running_stats import RunningStats, Summary
from cosine_concentration.vectors import (
    RandomSource,
    as_generator,
    paired_cosine_distances,
    random_unit_vectors,
)

logger = logging.getLogger(__name__)


class Sample(NamedTuple):
    original: float
    normalized: float


@dataclass(frozen=True, eq=False)
class SampleSet(SequenceABC):
    """The ordered samples drawn for one dimension, as two read-only arrays."""

    original: np.ndarray
    normalized: np.ndarray

    def __post_init__(self):
        for name in ('original', 'normalized'):
            arr = np.asarray(getattr(self, name), dtype=float)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)
        if len(self.original) != len(self.normalized):
            raise ValueError(
                f"Got {len(self.original)} original and {len(self.normalized)} "
                "normalized distances"
            )

    def __len__(self):
        return len(self.original)

    def __getitem__(self, i):
        if isinstance(i, slice):
            return SampleSet(self.original[i], self.normalized[i])
        return Sample(float(self.original[i]), float(self.normalized[i]))

    def __iter__(self):
        for o, n in zip(self.original, self.normalized):
            yield Sample(float(o), float(n))

    def __repr__(self):
        return f"{type(self).__name__}(<{len(self)} samples>)"


@dataclass(frozen=True)
class DimensionRecord:
    """Summary statistics of the distances sampled in one dimension."""

    dimension: int
    sample_count: int
    original_mean: float
    original_std: float
    normalized_mean: float
    normalized_std: float
    theoretical_std: float
    ratio: float  # original_std / theoretical_std

    @classmethod
    def from_summaries(
        cls, dimension: int, sample_count: int, original: Summary, normalized: Summary
    ) -> "DimensionRecord":
        expected_std = theoretical_std(dimension)
        return cls(
            dimension=dimension,
            sample_count=sample_count,
            original_mean=original.mean,
            original_std=original.std,
            normalized_mean=normalized.mean,
            normalized_std=normalized.std,
            theoretical_std=expected_std,
            ratio=original.std / expected_std,
        )


@dataclass(frozen=True, eq=False)
class SimulationResult:
    """Everything a finished run produced. Never partial, never mutated."""

    dimensions: Tuple[int, ...]
    records: Mapping[int, DimensionRecord] = field(repr=False)
    samples: Mapping[int, SampleSet] = field(repr=False)

    def __getitem__(self, dimension: int) -> DimensionRecord:
        return self.records[dimension]

    def summary_frame(self) -> pd.DataFrame:
        """One row of statistics per dimension, in the order they were simulated."""
        columns = [f.name for f in fields(DimensionRecord)]
        return pd.DataFrame(
            [asdict(self.records[dim]) for dim in self.dimensions], columns=columns
        )

    def std_comparison(self) -> pd.DataFrame:
        """Empirical vs theoretical standard deviation of distances, per dimension."""
        return self.summary_frame()[
            ['dimension', 'original_std', 'theoretical_std']
        ].rename(columns={'original_std': 'empirical_std'})

    def histograms(
        self,
        dimensions: Optional[Iterable[int]] = None,
        normalized: bool = False,
        view: Optional[HistogramView] = None,
    ) -> Dict[int, List[HistogramBin]]:
        """Density histograms of the samples of ``dimensions`` (all by default).

        Original distances use `ORIGINAL_VIEW` and normalized ones `NORMALIZED_VIEW`
        unless another ``view`` is given. Built fresh on every call.
        """
        if dimensions is None:
            dimensions = self.dimensions
        if view is None:
            view = NORMALIZED_VIEW if normalized else ORIGINAL_VIEW
        hists = {}
        for dim in dimensions:
            samples = self.samples[dim]
            values = samples.normalized if normalized else samples.original
            hists[dim] = build_histogram(
                values, view.domain_min, view.domain_max, view.bin_count
            )
        return hists


class Progress(NamedTuple):
    fraction_complete: float
    current_dimension: int
    completed_dimensions: int


ProgressCallback = Callable[[Progress], None]


class _ResultBuilder:
    """Collects records and samples of a run in progress. Only the run sees it."""

    def __init__(self):
        self.records: Dict[int, DimensionRecord] = {}
        self.samples: Dict[int, SampleSet] = {}

    def add(self, record: DimensionRecord, samples: SampleSet):
        self.records[record.dimension] = record
        self.samples[record.dimension] = samples

    def freeze(self) -> SimulationResult:
        return SimulationResult(
            dimensions=tuple(self.records),
            records=MappingProxyType(dict(self.records)),
            samples=MappingProxyType(dict(self.samples)),
        )


class Simulation:
    """Samples cosine distances between random unit vectors across dimensions.

    Args:
        config (SimulationConfig): Dimensions, sample size policy and batch size.
        rng: Seed or ``numpy.random.Generator`` to sample with. Pass one for
            reproducible runs; the default draws fresh entropy.

    >>> sim = Simulation(SimulationConfig((4, 16), sample_size=500), rng=0)
    >>> result = sim.run()
    >>> result.dimensions
    (4, 16)
    >>> len(result.samples[16])
    500
    """

    def __init__(self, config: Optional[SimulationConfig] = None, rng: RandomSource = None):
        self.config = config or SimulationConfig()
        self.config.validate()
        self.rng = as_generator(rng)

    def sample_sizes(self) -> Dict[int, int]:
        """The number of samples each dimension gets, in sweep order."""
        strategy = self.config.sample_size_strategy
        sizes = {}
        for dim in self.config.dimensions:
            n = strategy(dim)
            if not is_positive_int(n):
                raise InvalidSampleSize(dim, n)
            sizes[dim] = int(n)
        return sizes

    def _sample_dimension(
        self, dimension: int, n: int, done: int, total: int, completed: int
    ) -> Generator[Progress, None, Tuple[DimensionRecord, SampleSet]]:
        batch_size = self.config.batch_size
        original = np.empty(n)
        normalized = np.empty(n)
        original_stats, normalized_stats = RunningStats(), RunningStats()

        for start in range(0, n, batch_size):
            stop = min(start + batch_size, n)
            vectors = random_unit_vectors(dimension, 2 * (stop - start), self.rng)
            distances = paired_cosine_distances(vectors[0::2], vectors[1::2])
            original[start:stop] = distances
            normalized[start:stop] = normalize_distance(distances, dimension)
            original_stats.update_many(original[start:stop])
            normalized_stats.update_many(normalized[start:stop])
            yield Progress((done + stop) / total, dimension, completed)

        record = DimensionRecord.from_summaries(
            dimension, n, original_stats.finalize(), normalized_stats.finalize()
        )
        return record, SampleSet(original, normalized)

    def steps(self) -> Generator[Progress, None, SimulationResult]:
        """Run the simulation one batch at a time.

        Yields a `Progress` after every batch, and returns (as the generator's
        return value) the `SimulationResult` once every dimension is done.
        Use this to pump batches from your own scheduler; `run` and `run_async`
        are built on it.
        """
        sizes = self.sample_sizes()
        total = sum(sizes.values())
        builder = _ResultBuilder()
        done = 0
        for completed, (dim, n) in enumerate(sizes.items()):
            logger.info(f"Running simulation for dimension {dim} ({n} samples)")
            record, samples = yield from self._sample_dimension(
                dim, n, done, total, completed
            )
            builder.add(record, samples)
            done += n
            logger.info(
                f"Dimension {dim}: mean={record.original_mean:.4f} "
                f"std={record.original_std:.4f} "
                f"(theoretical {record.theoretical_std:.4f})"
            )
        return builder.freeze()

    def run(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event=None,
        timeout: Optional[float] = None,
    ) -> SimulationResult:
        """
        Run the whole sweep and return its result.

        Args:
            progress_callback (callable): Called with a `Progress` after every batch.
            cancel_event: Anything with an ``is_set()`` method (e.g.
                ``threading.Event``). Checked after every batch; once set, the run
                raises `Cancelled`.
            timeout (float): Seconds after which the run raises `SimulationTimeout`.
                Checked after every batch.

        Returns:
            SimulationResult: The complete result. A failed run returns nothing.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        steps = self.steps()
        try:
            while True:
                try:
                    progress = next(steps)
                except StopIteration as finished:
                    return finished.value
                _after_batch(progress, progress_callback, cancel_event, deadline)
        finally:
            steps.close()

    async def run_async(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event=None,
        timeout: Optional[float] = None,
    ) -> SimulationResult:
        """Same as `run`, but yields to the event loop after every batch."""
        deadline = None if timeout is None else time.monotonic() + timeout
        steps = self.steps()
        try:
            while True:
                try:
                    progress = next(steps)
                except StopIteration as finished:
                    return finished.value
                _after_batch(progress, progress_callback, cancel_event, deadline)
                await asyncio.sleep(0)
        finally:
            steps.close()


def _after_batch(progress, progress_callback, cancel_event, deadline):
    if progress_callback is not None:
        progress_callback(progress)
    if cancel_event is not None and cancel_event.is_set():
        msg = f"Simulation cancelled at dimension {progress.current_dimension}"
        logger.warning(msg)
        raise Cancelled(msg)
    if deadline is not None and time.monotonic() > deadline:
        msg = f"Simulation timed out at dimension {progress.current_dimension}"
        logger.warning(msg)
        raise SimulationTimeout(msg)


def run_simulation(
    dimensions: Sequence[int] = DFLT_DIMENSIONS,
    sample_size: SampleSizePolicy = tiered_sample_size,
    *,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event=None,
    rng: RandomSource = None,
    batch_size: int = DFLT_BATCH_SIZE,
    timeout: Optional[float] = None,
) -> SimulationResult:
    """
    Runs the concentration simulation across multiple dimensions.

    Args:
        dimensions (sequence of int): Dimensions to evaluate, in order.
        sample_size: Samples per dimension: a function of the dimension, a
            ``{dimension: count}`` mapping, or a single count.
        progress_callback, cancel_event, timeout: See `Simulation.run`.
        rng: Seed or ``numpy.random.Generator`` (default: fresh entropy).
        batch_size (int): Samples per batch between two hand-backs to the host.

    Returns:
        SimulationResult: Statistics and samples for each dimension.

    >>> result = run_simulation((2, 64), sample_size=1000, rng=1)
    >>> [record.sample_count for record in result.records.values()]
    [1000, 1000]
    """
    config = SimulationConfig(tuple(dimensions), sample_size, batch_size)
    return Simulation(config, rng).run(progress_callback, cancel_event, timeout)


async def run_simulation_async(
    dimensions: Sequence[int] = DFLT_DIMENSIONS,
    sample_size: SampleSizePolicy = tiered_sample_size,
    *,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event=None,
    rng: RandomSource = None,
    batch_size: int = DFLT_BATCH_SIZE,
    timeout: Optional[float] = None,
) -> SimulationResult:
    """Coroutine version of `run_simulation`, yielding to the loop between batches."""
    config = SimulationConfig(tuple(dimensions), sample_size, batch_size)
    return await Simulation(config, rng).run_async(
        progress_callback, cancel_event, timeout
    )
