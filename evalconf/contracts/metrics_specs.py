from __future__ import annotations

from typing import Dict, List, Optional

from ..registries.messages import register_message
from .aggregation import AggregationOptions, BinarizationOptions
from .base import SchemaModel, wire
from .thresholds import (
    CrossSliceMetricThreshold,
    CrossSliceMetricThresholds,
    MetricThreshold,
    PerSliceMetricThreshold,
    PerSliceMetricThresholds,
)


@register_message("MetricConfig")
class MetricConfig(SchemaModel):
    """
    One metric to compute.

    Attributes
    ----------
    class_name:
        Name of the metric class.

    module:
        Optional module defining class_name. When unset the class is looked up
        in the built-in metric namespaces (see
        :func:`evalconf.core.metric_configs.metric_search_modules`).

    config:
        Optional JSON-encoded kwargs for the class constructor. The outer
        braces may be omitted, e.g. '"name": "my_metric", "thresholds": [0.5]'.

    threshold / per_slice_thresholds / cross_slice_thresholds:
        Optional validation thresholds on all slices, on specific declared
        slices, and across declared cross slices.
    """

    class_name: Optional[str] = wire(1, "string")
    module: Optional[str] = wire(2, "string")
    config: Optional[str] = wire(3, "string")
    threshold: Optional[MetricThreshold] = wire(4, "MetricThreshold")
    per_slice_thresholds: List[PerSliceMetricThreshold] = wire(
        5, "repeated PerSliceMetricThreshold", default_factory=list
    )
    cross_slice_thresholds: List[CrossSliceMetricThreshold] = wire(
        6, "repeated CrossSliceMetricThreshold", default_factory=list
    )


@register_message("MetricsSpec")
class MetricsSpec(SchemaModel):
    """
    A group of metrics sharing model/output scope and binarize/aggregate options.

    model_names:
        Models (by ModelSpec.name) to compute for. Empty means all models; a
        configured baseline is added automatically.

    output_names:
        Outputs to compute for (multi-output models).

    aggregate:
        Macro and weighted-macro averaging need ``binarize`` in the same spec.

    query_key:
        Query key for query/ranking metrics.

    thresholds / per_slice_thresholds / cross_slice_thresholds:
        Keyed by metric name (e.g. "auc"). Meant for metrics saved with the
        model and computed without a MetricConfig; thresholds for configured
        metrics belong in their MetricConfig.
    """

    metrics: List[MetricConfig] = wire(1, "repeated MetricConfig", default_factory=list)
    model_names: List[str] = wire(2, "repeated string", default_factory=list)
    output_names: List[str] = wire(3, "repeated string", default_factory=list)
    binarize: Optional[BinarizationOptions] = wire(4, "BinarizationOptions")
    query_key: Optional[str] = wire(5, "string")
    aggregate: Optional[AggregationOptions] = wire(6, "AggregationOptions")
    thresholds: Dict[str, MetricThreshold] = wire(
        7, "map<string, MetricThreshold>", default_factory=dict
    )
    per_slice_thresholds: Dict[str, PerSliceMetricThresholds] = wire(
        8, "map<string, PerSliceMetricThresholds>", default_factory=dict
    )
    cross_slice_thresholds: Dict[str, CrossSliceMetricThresholds] = wire(
        9, "map<string, CrossSliceMetricThresholds>", default_factory=dict
    )

    def metric_names(self) -> List[str]:
        """Names thresholds can refer to: configured metrics, then threshold map keys."""
        from ..core.metric_configs import metric_name

        names: List[str] = []
        for cfg in self.metrics:
            try:
                name = metric_name(cfg)
            except ValueError:
                # Malformed config JSON; reported by validation.
                continue
            if name and name not in names:
                names.append(name)
        for mapping in (self.thresholds, self.per_slice_thresholds, self.cross_slice_thresholds):
            for name in mapping:
                if name not in names:
                    names.append(name)
        return names
