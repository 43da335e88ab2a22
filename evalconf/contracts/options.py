from __future__ import annotations

from typing import ClassVar, FrozenSet, Optional

from ..registries.messages import register_message
from .base import Int32, SchemaModel, wire
from .choices import ConfidenceIntervalMethodName
from .wrappers import RepeatedStringValue


@register_message("ConfidenceIntervalOptions")
class ConfidenceIntervalOptions(SchemaModel):
    method: ConfidenceIntervalMethodName = wire(
        1, "ConfidenceIntervalMethod", "UNKNOWN_CONFIDENCE_INTERVAL_METHOD"
    )


@register_message("Options")
class Options(SchemaModel):
    """
    Evaluation-run toggles.

    include_default_metrics:
        Include metrics saved with the model(s). Metrics from metrics_specs
        override saved ones with the same name. Unset means True.

    compute_confidence_intervals:
        Compute confidence intervals (method in confidence_intervals).
        Unset means False.

    min_slice_size:
        Omit slices with fewer examples. Unset means 1.

    disabled_outputs:
        Outputs that should not be written (e.g. "metrics", "plots",
        "analysis", "eval_config.json").
    """

    reserved_numbers: ClassVar[FrozenSet[int]] = frozenset({4, 5, 6, 8})

    include_default_metrics: Optional[bool] = wire(1, "google.protobuf.BoolValue")
    compute_confidence_intervals: Optional[bool] = wire(2, "google.protobuf.BoolValue")
    min_slice_size: Optional[Int32] = wire(3, "google.protobuf.Int32Value")
    disabled_outputs: Optional[RepeatedStringValue] = wire(7, "RepeatedStringValue")
    confidence_intervals: Optional[ConfidenceIntervalOptions] = wire(9, "ConfidenceIntervalOptions")

    @property
    def include_default_metrics_enabled(self) -> bool:
        return True if self.include_default_metrics is None else self.include_default_metrics

    @property
    def confidence_intervals_enabled(self) -> bool:
        return bool(self.compute_confidence_intervals)

    @property
    def effective_min_slice_size(self) -> int:
        return 1 if self.min_slice_size is None else self.min_slice_size

    def is_output_disabled(self, output_name: str) -> bool:
        if self.disabled_outputs is None:
            return False
        return output_name in self.disabled_outputs.values
