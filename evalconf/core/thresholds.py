from __future__ import annotations

"""Checking computed metric values against MetricThreshold rules."""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..contracts.thresholds import GenericChangeThreshold, GenericValueThreshold, MetricThreshold
from ..exceptions import ThresholdEvaluationError


@dataclass
class ThresholdResult:
    passed: bool
    failures: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.passed


def value_bounds(threshold: GenericValueThreshold) -> tuple[float, float]:
    lower = -np.inf if threshold.lower_bound is None else float(threshold.lower_bound)
    upper = np.inf if threshold.upper_bound is None else float(threshold.upper_bound)
    return lower, upper


def check_value_threshold(threshold: GenericValueThreshold, value: float) -> bool:
    """True if lower_bound <= value <= upper_bound (unset bounds are infinite)."""
    lower, upper = value_bounds(threshold)
    value = float(value)
    return bool(lower <= value <= upper)


def check_change_threshold(threshold: GenericChangeThreshold, new: float, old: float) -> bool:
    """
    Compare delta = new - old against the slacks.

    HIGHER_IS_BETTER passes when delta >= absolute and delta / old >= relative;
    LOWER_IS_BETTER passes when delta <= absolute and delta / old <= relative.
    Unset slacks are skipped. A relative slack against old == 0 only passes
    for delta == 0.
    """
    if threshold.direction == "UNKNOWN":
        raise ThresholdEvaluationError('"UNKNOWN" direction for change threshold.')

    new = float(new)
    old = float(old)
    delta = new - old
    higher_is_better = threshold.direction == "HIGHER_IS_BETTER"

    if threshold.absolute is not None:
        ok = delta >= threshold.absolute if higher_is_better else delta <= threshold.absolute
        if not ok:
            return False

    if threshold.relative is not None:
        if old == 0.0:
            return delta == 0.0
        ratio = delta / old
        ok = ratio >= threshold.relative if higher_is_better else ratio <= threshold.relative
        if not ok:
            return False

    return True


def check_metric_threshold(
    threshold: MetricThreshold,
    value: float,
    baseline_value: Optional[float] = None,
) -> ThresholdResult:
    """Apply every branch of ``threshold`` that is set.

    Both branches may be set at once (they are independent oneofs); the result
    fails if either one fails.
    """
    failures: List[str] = []

    if threshold.value_threshold is not None:
        if not check_value_threshold(threshold.value_threshold, value):
            lower, upper = value_bounds(threshold.value_threshold)
            failures.append(f"value {value} outside [{lower}, {upper}]")

    if threshold.change_threshold is not None:
        if baseline_value is None:
            raise ThresholdEvaluationError("change threshold requires a baseline value")
        if not check_change_threshold(threshold.change_threshold, value, baseline_value):
            ct = threshold.change_threshold
            failures.append(
                f"change {value - baseline_value} vs baseline {baseline_value} violates "
                f"{ct.direction} (absolute={ct.absolute}, relative={ct.relative})"
            )

    return ThresholdResult(passed=not failures, failures=failures)
