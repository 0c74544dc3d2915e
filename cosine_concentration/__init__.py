"""
The concentration of cosine distances in high dimensions.

As the dimension grows, cosine distances between random unit vectors cluster
around 1.0, with a standard deviation shrinking like ``1/sqrt(dimension)``.
This package measures that by Monte Carlo simulation, and provides a
dimension-aware normalization that gives distances comparable spread across
dimensions.

>>> result = run_simulation((8, 512), sample_size=2000, rng=7)
>>> record = result[512]
>>> bool(abs(record.original_mean - 1) < 0.01)
True
>>> bool(0.9 < record.ratio < 1.1)
True
"""

from cosine_concentration.config import (
    DFLT_BATCH_SIZE,
    DFLT_DIMENSIONS,
    NORMALIZED_VIEW,
    ORIGINAL_VIEW,
    HistogramView,
    SimulationConfig,
    as_sample_size_strategy,
    tiered_sample_size,
)
from cosine_concentration.errors import (
    Cancelled,
    ConcentrationError,
    DimensionMismatch,
    InsufficientSamples,
    InvalidSampleSize,
    SimulationTimeout,
)
from cosine_concentration.histogram import HistogramBin, build_histogram, total_mass
from cosine_concentration.logging_config import setup_logging
from cosine_concentration.normalization import (
    expected_dot_product_variance,
    normalization_alpha,
    normalize_distance,
    theoretical_density,
    theoretical_std,
)
from cosine_concentration.running_stats import RunningStats, Summary
from cosine_concentration.simulation import (
    DimensionRecord,
    Progress,
    Sample,
    SampleSet,
    Simulation,
    SimulationResult,
    run_simulation,
    run_simulation_async,
)
from cosine_concentration.vectors import (
    as_generator,
    box_muller,
    cosine_distance,
    paired_cosine_distances,
    random_unit_vector,
    random_unit_vectors,
)
