from __future__ import annotations

"""Helpers for working with EvalConfig: defaults, model lookups, run records."""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ..contracts.eval_config import EvalConfig, EvalConfigAndVersion, EvalRun
from ..contracts.metrics_specs import MetricsSpec
from ..contracts.model_specs import ModelSpec
from ..contracts.slicing_specs import SlicingSpec
from ..contracts.thresholds import PerSliceMetricThreshold
from ..settings import default_schema_version

logger = logging.getLogger(__name__)


def has_baseline(eval_config: EvalConfig) -> bool:
    return eval_config.baseline_model_spec() is not None


def get_baseline_model_spec(eval_config: EvalConfig) -> Optional[ModelSpec]:
    return eval_config.baseline_model_spec()


def get_model_spec(eval_config: EvalConfig, model_name: Optional[str] = None) -> Optional[ModelSpec]:
    return eval_config.model_spec(model_name)


def get_model_type(eval_config: EvalConfig, model_name: Optional[str] = None) -> Optional[str]:
    spec = eval_config.model_spec(model_name)
    return spec.model_type if spec is not None else None


def iter_per_slice_thresholds(metrics_spec: MetricsSpec) -> Iterator[PerSliceMetricThreshold]:
    """Per-slice thresholds from both the MetricConfigs and the name-keyed map."""
    for metric in metrics_spec.metrics:
        yield from metric.per_slice_thresholds
    for group in metrics_spec.per_slice_thresholds.values():
        yield from group.thresholds


def referenced_slicing_specs(eval_config: EvalConfig) -> List[SlicingSpec]:
    """Slices referenced by cross slicing specs and per-slice thresholds, in config order."""
    out: List[SlicingSpec] = []
    for cross in eval_config.cross_slicing_specs:
        out.extend(cross.referenced_specs())
    for metrics_spec in eval_config.metrics_specs:
        for threshold in iter_per_slice_thresholds(metrics_spec):
            out.extend(threshold.slicing_specs)
    return out


def _append_missing(specs: List[SlicingSpec], extra: Iterable[SlicingSpec]) -> List[SlicingSpec]:
    seen = {s.canonical_key() for s in specs}
    out = list(specs)
    for spec in extra:
        key = spec.canonical_key()
        if key in seen:
            continue
        logger.debug("auto-adding referenced slicing spec %s", key)
        seen.add(key)
        out.append(spec)
    return out


def _with_baseline_model_name(metrics_spec: MetricsSpec, baseline_name: Optional[str]) -> MetricsSpec:
    if not baseline_name or not metrics_spec.model_names or baseline_name in metrics_spec.model_names:
        return metrics_spec
    return metrics_spec.model_copy(update={"model_names": list(metrics_spec.model_names) + [baseline_name]})


def update_eval_config_with_defaults(eval_config: EvalConfig) -> EvalConfig:
    """
    Return a copy of ``eval_config`` with defaults filled in:
      - no slicing_specs -> the overall slice
      - slices referenced by cross slicing specs or per-slice thresholds are
        appended to slicing_specs when missing
      - a baseline model is added to every MetricsSpec that lists model_names
        (an empty list already means all models)
    The input is left untouched.
    """
    slicing_specs = list(eval_config.slicing_specs) or [SlicingSpec()]
    slicing_specs = _append_missing(slicing_specs, referenced_slicing_specs(eval_config))

    baseline = eval_config.baseline_model_spec()
    baseline_name = baseline.name if baseline is not None else None
    metrics_specs = [_with_baseline_model_name(ms, baseline_name) for ms in eval_config.metrics_specs]

    return eval_config.model_copy(
        update={"slicing_specs": slicing_specs, "metrics_specs": metrics_specs}
    )


def make_eval_config_and_version(
    eval_config: EvalConfig,
    *,
    version: Optional[str] = None,
) -> EvalConfigAndVersion:
    return EvalConfigAndVersion(eval_config=eval_config, version=version or default_schema_version())


def make_eval_run(
    eval_config: EvalConfig,
    *,
    data_location: Optional[str] = None,
    file_format: Optional[str] = None,
    model_locations: Optional[Dict[str, str]] = None,
    version: Optional[str] = None,
) -> EvalRun:
    """Build the run record persisted next to evaluation outputs."""
    return EvalRun(
        eval_config=eval_config,
        version=version or default_schema_version(),
        data_location=data_location,
        file_format=file_format,
        model_locations=dict(model_locations or {}),
    )
