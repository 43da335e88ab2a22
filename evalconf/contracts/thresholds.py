from __future__ import annotations

from typing import List, Optional

from ..registries.messages import register_message
from .base import SchemaModel, wire
from .choices import MetricDirectionName
from .slicing_specs import CrossSlicingSpec, SlicingSpec


@register_message("GenericChangeThreshold")
class GenericChangeThreshold(SchemaModel):
    """
    Threshold on the change of a metric relative to the baseline model.

    With delta = new - old:
      - HIGHER_IS_BETTER (e.g. AUC): fail if delta < absolute, or if
        delta / old < relative.
      - LOWER_IS_BETTER (e.g. loss): fail if delta > absolute, or if
        delta / old > relative.
    Unset slacks do not constrain.
    """

    absolute: Optional[float] = wire(1, "google.protobuf.DoubleValue")
    relative: Optional[float] = wire(2, "google.protobuf.DoubleValue")
    direction: MetricDirectionName = wire(3, "MetricDirection", "UNKNOWN")


@register_message("GenericValueThreshold")
class GenericValueThreshold(SchemaModel):
    """Fail unless the value lies in [lower_bound, upper_bound], both inclusive.

    An unset lower bound is -inf, an unset upper bound +inf.
    """

    lower_bound: Optional[float] = wire(1, "google.protobuf.DoubleValue")
    upper_bound: Optional[float] = wire(2, "google.protobuf.DoubleValue")


@register_message("MetricThreshold")
class MetricThreshold(SchemaModel):
    """Validation rule for one metric.

    NOTE: value_threshold and change_threshold live in two *independent*
    oneofs (validate_absolute / validate_relative), unlike
    AggregationOptions.type where the alternatives exclude each other. Both may
    be set at once, and then both checks apply.
    """

    value_threshold: Optional[GenericValueThreshold] = wire(
        1, "GenericValueThreshold", oneof="validate_absolute"
    )
    change_threshold: Optional[GenericChangeThreshold] = wire(
        2, "GenericChangeThreshold", oneof="validate_relative"
    )

    @property
    def is_empty(self) -> bool:
        return self.value_threshold is None and self.change_threshold is None


@register_message("PerSliceMetricThreshold")
class PerSliceMetricThreshold(SchemaModel):
    """
    Threshold applied to specific slices only.

    slicing_specs are references to slices declared in EvalConfig.slicing_specs,
    not new slice definitions. An empty SlicingSpec means the overall slice.
    """

    slicing_specs: List[SlicingSpec] = wire(1, "repeated SlicingSpec", default_factory=list)
    threshold: Optional[MetricThreshold] = wire(2, "MetricThreshold")


@register_message("PerSliceMetricThresholds")
class PerSliceMetricThresholds(SchemaModel):
    thresholds: List[PerSliceMetricThreshold] = wire(
        1, "repeated PerSliceMetricThreshold", default_factory=list
    )


@register_message("CrossSliceMetricThreshold")
class CrossSliceMetricThreshold(SchemaModel):
    """Threshold applied to the comparison of declared cross slices."""

    cross_slicing_specs: List[CrossSlicingSpec] = wire(
        1, "repeated CrossSlicingSpec", default_factory=list
    )
    threshold: Optional[MetricThreshold] = wire(2, "MetricThreshold")


@register_message("CrossSliceMetricThresholds")
class CrossSliceMetricThresholds(SchemaModel):
    thresholds: List[CrossSliceMetricThreshold] = wire(
        1, "repeated CrossSliceMetricThreshold", default_factory=list
    )
