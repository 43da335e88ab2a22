"""Configuration schema contracts.

This package contains the immutable pydantic records describing an evaluation
configuration, and the Literal-based choice types they use.

Export policy:
- Keep module imports explicit in most of the codebase:
    from evalconf.contracts.eval_config import EvalConfig
- The names re-exported here are a small set of convenience imports for
  callers that prefer a single namespace.
- Importing this package registers every record as a wire message.
"""

from .choices import (
    DEFAULT_OUTPUT_NAME,
    AggregationKind,
    BinarizationKind,
    ConfidenceIntervalMethodName,
    MetricDirectionName,
    ModelTypeName,
)
from .base import SchemaModel, WireField, wire
from .wrappers import RepeatedInt32Value, RepeatedStringValue
from .model_specs import ModelSpec, key_for_output
from .slicing_specs import CrossSlicingSpec, SlicingSpec
from .aggregation import AggregationOptions, BinarizationOptions
from .thresholds import (
    CrossSliceMetricThreshold,
    CrossSliceMetricThresholds,
    GenericChangeThreshold,
    GenericValueThreshold,
    MetricThreshold,
    PerSliceMetricThreshold,
    PerSliceMetricThresholds,
)
from .metrics_specs import MetricConfig, MetricsSpec
from .options import ConfidenceIntervalOptions, Options
from .eval_config import EvalConfig, EvalConfigAndVersion, EvalRun

__all__ = [
    # choice types
    "DEFAULT_OUTPUT_NAME",
    "AggregationKind",
    "BinarizationKind",
    "ConfidenceIntervalMethodName",
    "MetricDirectionName",
    "ModelTypeName",
    # base
    "SchemaModel",
    "WireField",
    "wire",
    # records
    "RepeatedInt32Value",
    "RepeatedStringValue",
    "ModelSpec",
    "key_for_output",
    "SlicingSpec",
    "CrossSlicingSpec",
    "AggregationOptions",
    "BinarizationOptions",
    "GenericChangeThreshold",
    "GenericValueThreshold",
    "MetricThreshold",
    "PerSliceMetricThreshold",
    "PerSliceMetricThresholds",
    "CrossSliceMetricThreshold",
    "CrossSliceMetricThresholds",
    "MetricConfig",
    "MetricsSpec",
    "ConfidenceIntervalOptions",
    "Options",
    "EvalConfig",
    "EvalConfigAndVersion",
    "EvalRun",
]
