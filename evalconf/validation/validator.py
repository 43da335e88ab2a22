"""Exhaustive cross-field validation of an EvalConfig.

Structural rules (types, enum names, unknown keys) are enforced by the pydantic
records at construction. The rules here span several fields or records and
are collected, never short-circuited: a config is usually written once and
run many times, so every problem is reported up front.
"""

from __future__ import annotations

import logging
import re
import warnings
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import numpy as np
from pydantic import ValidationError

from ..contracts.aggregation import AggregationOptions, BinarizationOptions
from ..contracts.eval_config import EvalConfig, EvalRun
from ..contracts.metrics_specs import MetricConfig, MetricsSpec
from ..contracts.model_specs import ModelSpec
from ..contracts.options import Options
from ..contracts.slicing_specs import CrossSlicingSpec, SlicingSpec
from ..contracts.thresholds import CrossSliceMetricThreshold, MetricThreshold, PerSliceMetricThreshold
from ..core.metric_configs import parse_metric_config_kwargs
from ..core.thresholds import value_bounds
from ..exceptions import MetricConfigError
from .issues import ValidationReport

logger = logging.getLogger(__name__)


@dataclass
class _Context:
    report: ValidationReport
    model_specs_declared: bool
    model_names: Set[str] = field(default_factory=set)
    slices: Set[Any] = field(default_factory=set)
    cross_slices: Set[Any] = field(default_factory=set)


def _join(path: str, child: str) -> str:
    if not path:
        return child
    if child.startswith("["):
        return path + child
    return f"{path}.{child}"


# -----------------------------
# Models
# -----------------------------

def _check_model_specs(specs: list[ModelSpec], path: str, report: ValidationReport) -> None:
    baselines = [i for i, s in enumerate(specs) if s.is_baseline]
    if len(baselines) > 1:
        report.add(
            "multiple_baselines",
            _join(path, "model_specs"),
            f"{len(baselines)} model specs are marked is_baseline (indices {baselines}); at most one is allowed",
        )

    if len(specs) > 1:
        for i, spec in enumerate(specs):
            if not spec.name:
                report.add(
                    "missing_model_name",
                    _join(path, f"model_specs[{i}].name"),
                    "a name is required when more than one model is configured",
                )

    counts = Counter(s.name for s in specs if s.name)
    for name, n in sorted(counts.items()):
        if n > 1:
            report.add(
                "duplicate_model_name",
                _join(path, "model_specs"),
                f"model name {name!r} is used by {n} model specs",
            )

    for i, spec in enumerate(specs):
        for single, plural in ModelSpec.exclusive_pairs:
            if getattr(spec, single) is not None and getattr(spec, plural):
                report.add(
                    "exclusive_fields",
                    _join(path, f"model_specs[{i}]"),
                    f"use one of {single} or {plural}, not both",
                )


# -----------------------------
# Thresholds
# -----------------------------

def _check_threshold(threshold: Optional[MetricThreshold], path: str, report: ValidationReport) -> None:
    if threshold is None or threshold.is_empty:
        report.add("empty_threshold", path, "neither value_threshold nor change_threshold is set")
        return

    # Both branches may be set at once; each is checked on its own.
    if threshold.value_threshold is not None:
        lower, upper = value_bounds(threshold.value_threshold)
        if np.isnan(lower) or np.isnan(upper):
            report.add(
                "unsatisfiable_range",
                _join(path, "value_threshold"),
                "a NaN bound fails every value",
            )
        elif lower > upper:
            report.add(
                "unsatisfiable_range",
                _join(path, "value_threshold"),
                f"lower_bound {lower} is greater than upper_bound {upper}",
            )

    if threshold.change_threshold is not None and threshold.change_threshold.direction == "UNKNOWN":
        report.add(
            "unknown_direction",
            _join(path, "change_threshold.direction"),
            "change threshold needs direction LOWER_IS_BETTER or HIGHER_IS_BETTER",
        )

    if threshold.change_threshold is not None:
        for slack in ("absolute", "relative"):
            value = getattr(threshold.change_threshold, slack)
            if value is not None and np.isnan(value):
                report.add(
                    "unsatisfiable_range",
                    _join(path, f"change_threshold.{slack}"),
                    f"a NaN {slack} slack fails every change",
                )


def _check_per_slice(threshold: PerSliceMetricThreshold, path: str, ctx: _Context) -> None:
    _check_threshold(threshold.threshold, _join(path, "threshold"), ctx.report)
    for k, spec in enumerate(threshold.slicing_specs):
        if spec.canonical_key() not in ctx.slices:
            ctx.report.add(
                "dangling_slice",
                _join(path, f"slicing_specs[{k}]"),
                f"slice {_describe(spec)} is not declared in slicing_specs",
            )


def _check_cross_slice(threshold: CrossSliceMetricThreshold, path: str, ctx: _Context) -> None:
    _check_threshold(threshold.threshold, _join(path, "threshold"), ctx.report)
    for k, cross in enumerate(threshold.cross_slicing_specs):
        if cross.canonical_key() not in ctx.cross_slices:
            ctx.report.add(
                "dangling_cross_slice",
                _join(path, f"cross_slicing_specs[{k}]"),
                "cross slice is not declared in cross_slicing_specs",
            )


def _describe(spec: SlicingSpec) -> str:
    if spec.is_overall:
        return "<overall>"
    return f"(feature_keys={spec.feature_keys}, feature_values={spec.feature_values})"


# -----------------------------
# Metrics
# -----------------------------

def _check_aggregate(
    aggregate: AggregationOptions,
    binarize: Optional[BinarizationOptions],
    path: str,
    report: ValidationReport,
) -> None:
    # Unlike MetricThreshold, `type` is a real single-choice oneof.
    chosen = aggregate.chosen()
    if len(chosen) > 1:
        report.add(
            "oneof_multiple",
            path,
            f"only one of {', '.join(AggregationOptions.type_alternatives)} may be set (got {', '.join(chosen)})",
        )

    if aggregate.requires_binarization and (binarize is None or binarize.is_empty):
        report.add(
            "aggregation_requires_binarize",
            path,
            "macro / weighted macro averaging requires binarize options in the same metrics spec",
        )

    for class_id in sorted(aggregate.class_weights):
        if class_id < 0:
            report.add("invalid_class_id", _join(path, "class_weights"), f"negative class id {class_id}")

    if aggregate.weighted_macro_average and aggregate.class_weights:
        warnings.warn(
            f"{path}: class_weights combined with weighted_macro_average apply two weightings "
            "(positive-label ratio and explicit weights)",
            UserWarning,
            stacklevel=3,
        )


def _check_binarize(binarize: BinarizationOptions, path: str, report: ValidationReport) -> None:
    if binarize.class_ids is not None:
        for class_id in binarize.class_ids.values:
            if class_id < 0:
                report.add("invalid_class_id", _join(path, "class_ids"), f"negative class id {class_id}")


def _check_metric_config(metric: MetricConfig, path: str, ctx: _Context) -> None:
    if not metric.class_name:
        ctx.report.add("missing_class_name", _join(path, "class_name"), "class_name is required")

    try:
        parse_metric_config_kwargs(metric.config)
    except MetricConfigError as e:
        ctx.report.add("invalid_metric_config", _join(path, "config"), str(e))

    if metric.threshold is not None:
        _check_threshold(metric.threshold, _join(path, "threshold"), ctx.report)
    for k, t in enumerate(metric.per_slice_thresholds):
        _check_per_slice(t, _join(path, f"per_slice_thresholds[{k}]"), ctx)
    for k, t in enumerate(metric.cross_slice_thresholds):
        _check_cross_slice(t, _join(path, f"cross_slice_thresholds[{k}]"), ctx)


def _check_metrics_spec(spec: MetricsSpec, path: str, ctx: _Context) -> None:
    if ctx.model_specs_declared:
        for j, name in enumerate(spec.model_names):
            if name not in ctx.model_names:
                ctx.report.add(
                    "unknown_model_name",
                    _join(path, f"model_names[{j}]"),
                    f"model {name!r} is not defined in model_specs",
                )

    if spec.aggregate is not None:
        _check_aggregate(spec.aggregate, spec.binarize, _join(path, "aggregate"), ctx.report)
    if spec.binarize is not None:
        _check_binarize(spec.binarize, _join(path, "binarize"), ctx.report)

    for j, metric in enumerate(spec.metrics):
        _check_metric_config(metric, _join(path, f"metrics[{j}]"), ctx)

    for name, threshold in sorted(spec.thresholds.items()):
        _check_threshold(threshold, _join(path, f"thresholds[{name!r}]"), ctx.report)
    for name, group in sorted(spec.per_slice_thresholds.items()):
        for k, t in enumerate(group.thresholds):
            _check_per_slice(t, _join(path, f"per_slice_thresholds[{name!r}].thresholds[{k}]"), ctx)
    for name, group in sorted(spec.cross_slice_thresholds.items()):
        for k, t in enumerate(group.thresholds):
            _check_cross_slice(t, _join(path, f"cross_slice_thresholds[{name!r}].thresholds[{k}]"), ctx)


def _check_options(options: Options, path: str, report: ValidationReport) -> None:
    if options.min_slice_size is not None and options.min_slice_size < 0:
        report.add(
            "negative_min_slice_size",
            _join(path, "min_slice_size"),
            f"min_slice_size must be >= 0 (got {options.min_slice_size})",
        )


# -----------------------------
# Entry points
# -----------------------------

def _declared_slices(eval_config: EvalConfig) -> Tuple[Set[Any], Set[Any]]:
    slices = {s.canonical_key() for s in eval_config.slicing_specs}
    if not eval_config.slicing_specs:
        slices.add(SlicingSpec().canonical_key())
    # Slices mentioned by cross slicing specs are added automatically.
    for cross in eval_config.cross_slicing_specs:
        slices.update(s.canonical_key() for s in cross.referenced_specs())
    cross_slices = {c.canonical_key() for c in eval_config.cross_slicing_specs}
    return slices, cross_slices


def validate_eval_config(eval_config: EvalConfig, *, path: str = "") -> ValidationReport:
    """Check every cross-field invariant of ``eval_config`` and report all violations."""
    report = ValidationReport()
    slices, cross_slices = _declared_slices(eval_config)
    ctx = _Context(
        report=report,
        model_specs_declared=bool(eval_config.model_specs),
        model_names=set(eval_config.model_names()),
        slices=slices,
        cross_slices=cross_slices,
    )

    _check_model_specs(eval_config.model_specs, path, report)
    for i, spec in enumerate(eval_config.metrics_specs):
        _check_metrics_spec(spec, _join(path, f"metrics_specs[{i}]"), ctx)
    if eval_config.options is not None:
        _check_options(eval_config.options, _join(path, "options"), report)

    logger.debug("validated eval config: %d issue(s)", len(report.issues))
    return report


def validate_eval_run(eval_run: EvalRun) -> ValidationReport:
    if eval_run.eval_config is None:
        return ValidationReport()
    return validate_eval_config(eval_run.eval_config, path="eval_config")


def _loc_to_path(loc: Tuple[Any, ...]) -> str:
    path = ""
    for part in loc:
        path = _join(path, f"[{part}]" if isinstance(part, int) else str(part))
    return path

# pydantic error type -> issue code; anything else is a structural error.
_PYDANTIC_CODES = {
    "literal_error": "unknown_enum_value",
    "enum": "unknown_enum_value",
    "greater_than_equal": "out_of_range",
    "less_than_equal": "out_of_range",
    "out_of_range": "out_of_range",
}


def report_from_pydantic(err: ValidationError, *, path: str = "") -> ValidationReport:
    """Turn pydantic structural errors into issues."""
    report = ValidationReport()
    for e in err.errors():
        code = _PYDANTIC_CODES.get(e.get("type"), "invalid_structure")
        report.add(code, _join(path, _loc_to_path(tuple(e.get("loc", ())))), e.get("msg", "invalid value"))
    return report


# Repeated top-level sections, parsed item by item.
_LIST_SECTIONS = {
    "model_specs": ModelSpec,
    "slicing_specs": SlicingSpec,
    "cross_slicing_specs": CrossSlicingSpec,
    "metrics_specs": MetricsSpec,
}

# Cross-field checks that need every item of these sections to be meaningful.
_NEEDS_COMPLETE_SECTIONS = {
    "unknown_model_name": ("model_specs",),
    "dangling_slice": ("slicing_specs", "cross_slicing_specs"),
    "dangling_cross_slice": ("cross_slicing_specs",),
}

_INDEXED_PATH = re.compile(r"^(\w+)\[(\d+)\]")


def _original_path(path: str, kept: Dict[str, List[int]]) -> str:
    """Map an index into the parsed subset of a section back to the raw index."""
    m = _INDEXED_PATH.match(path)
    if m is None or m.group(1) not in kept:
        return path
    original = kept[m.group(1)][int(m.group(2))]
    return f"{m.group(1)}[{original}]{path[m.end():]}"


def validate_eval_config_dict(data: Mapping[str, Any]) -> Tuple[Optional[EvalConfig], ValidationReport]:
    """Build and validate an EvalConfig from a plain mapping.

    Every top-level section (and every item of the repeated ones) is parsed on
    its own, so a malformed item does not hide problems elsewhere: structural
    issues are reported together with the cross-field issues of everything
    that did parse.

    Returns (config, report); config is None when any part of the mapping
    does not have the right structure.
    """
    if not isinstance(data, Mapping):
        try:
            eval_config = EvalConfig.model_validate(data)
        except ValidationError as e:
            return None, report_from_pydantic(e)
        return eval_config, validate_eval_config(eval_config)

    report = ValidationReport()
    sections: Dict[str, Any] = {}
    # Raw index of every item that parsed, per repeated section.
    kept: Dict[str, List[int]] = {}
    incomplete: Set[str] = set()

    for key, value in data.items():
        model_cls = _LIST_SECTIONS.get(key)
        if model_cls is not None and isinstance(value, (list, tuple)):
            items = []
            kept[key] = []
            for i, item in enumerate(value):
                try:
                    items.append(model_cls.model_validate(item))
                except ValidationError as e:
                    report.extend(report_from_pydantic(e, path=f"{key}[{i}]"))
                    incomplete.add(key)
                    continue
                kept[key].append(i)
            sections[key] = items
            continue

        # Scalar sections, malformed repeated sections and unknown keys.
        try:
            sections[key] = getattr(EvalConfig.model_validate({key: value}), key)
        except ValidationError as e:
            report.extend(report_from_pydantic(e))
            incomplete.add(key)

    structurally_ok = report.ok
    eval_config = EvalConfig(**{k: v for k, v in sections.items() if k in EvalConfig.model_fields})

    for issue in validate_eval_config(eval_config):
        if any(s in incomplete for s in _NEEDS_COMPLETE_SECTIONS.get(issue.code, ())):
            continue
        report.add(issue.code, _original_path(issue.path, kept), issue.message)

    logger.debug("validated raw eval config: %d issue(s)", len(report.issues))
    return (eval_config if structurally_ok else None), report
