"""evalconf: configuration schema for model evaluation runs.

Records live in :mod:`evalconf.contracts`, cross-field validation in
:mod:`evalconf.validation`, encoders in :mod:`evalconf.io`, and small pure
helpers (slicing, threshold checks, defaults) in :mod:`evalconf.core`.
"""

from .version import __version__
from .contracts import (
    AggregationOptions,
    BinarizationOptions,
    ConfidenceIntervalOptions,
    CrossSliceMetricThreshold,
    CrossSliceMetricThresholds,
    CrossSlicingSpec,
    EvalConfig,
    EvalConfigAndVersion,
    EvalRun,
    GenericChangeThreshold,
    GenericValueThreshold,
    MetricConfig,
    MetricsSpec,
    MetricThreshold,
    ModelSpec,
    Options,
    PerSliceMetricThreshold,
    PerSliceMetricThresholds,
    RepeatedInt32Value,
    RepeatedStringValue,
    SlicingSpec,
)
from .exceptions import (
    EvalConfigDecodeError,
    EvalConfigError,
    EvalConfigValidationError,
    MetricConfigError,
    SchemaEvolutionError,
    ThresholdEvaluationError,
)
from .validation import ValidationReport, validate_eval_config
