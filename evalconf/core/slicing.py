from __future__ import annotations

"""Slice membership for a single example.

Only the pure part of slicing lives here: given one example's features, which
slice keys does a SlicingSpec produce? Reading data and grouping examples is
the evaluation engine's job.

A slice key is a tuple of (column, value) pairs sorted by column; the overall
slice is the empty tuple.
"""

import itertools
import re
from typing import Any, Iterator, List, Mapping, Sequence, Tuple, Union

import numpy as np

from ..contracts.slicing_specs import SlicingSpec

SliceValue = Union[str, int, float]
SliceKey = Tuple[Tuple[str, SliceValue], ...]

OVERALL_SLICE_NAME = "Overall"
OVERALL_SLICE_KEY: SliceKey = ()

_NUMBER_RE = re.compile(r"[+-]?\d+(\.\d*)?([eE][+-]?\d+)?\Z", re.ASCII)


def parse_slice_value(text: str) -> SliceValue:
    """'20' -> 20, '0.5' -> 0.5, anything else stays a string.

    Only plain decimal literals count as numbers: '1_000', ' 20', 'inf' and
    'nan' stay strings.
    """
    m = _NUMBER_RE.match(text)
    if m is None:
        return text
    if m.group(1) is None and m.group(2) is None:
        return int(text)
    return float(text)


def _normalize(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, np.generic):
        return value.item()
    return value


def feature_values_of(feature: Any) -> List[Any]:
    """All values of one feature (multivalent features yield several)."""
    if feature is None:
        return []
    if isinstance(feature, np.ndarray):
        return [_normalize(v) for v in feature.ravel().tolist()]
    if isinstance(feature, (list, tuple, set, frozenset)):
        return [_normalize(v) for v in feature]
    return [_normalize(feature)]


def value_matches(expected: str, actual: Any) -> bool:
    """Compare a feature_values string against one feature value.

    Numeric-looking strings also match the numeric form: "20" matches "20",
    20 and 20.0.
    """
    actual = _normalize(actual)
    if isinstance(actual, str):
        return actual == expected
    if isinstance(actual, bool):
        return str(actual) == expected
    parsed = parse_slice_value(expected)
    if isinstance(parsed, str) or not isinstance(actual, (int, float)):
        return False
    return float(actual) == float(parsed)


def _dedupe(values: Sequence[Any]) -> List[Any]:
    out: List[Any] = []
    for v in values:
        if v not in out:
            out.append(v)
    return out


def generate_slices(spec: SlicingSpec, features: Mapping[str, Any]) -> Iterator[SliceKey]:
    """Yield every slice key ``spec`` produces for one example."""
    fixed: List[Tuple[str, SliceValue]] = []
    for column, expected in sorted(spec.feature_values.items()):
        if not any(value_matches(expected, v) for v in feature_values_of(features.get(column))):
            return
        fixed.append((column, parse_slice_value(expected)))

    crossed: List[List[Tuple[str, Any]]] = []
    for column in sorted(set(spec.feature_keys)):
        values = _dedupe(feature_values_of(features.get(column)))
        if not values:
            return
        crossed.append([(column, v) for v in values])

    for combo in itertools.product(*crossed):
        yield tuple(sorted(fixed + list(combo), key=lambda kv: kv[0]))


def spec_matches(spec: SlicingSpec, features: Mapping[str, Any]) -> bool:
    return next(generate_slices(spec, features), None) is not None


def stringify_slice_key(key: SliceKey) -> str:
    """Overall -> "Overall"; (("age", 20), ("country", "us")) -> "age_country:20_us"."""
    if not key:
        return OVERALL_SLICE_NAME
    columns = "_".join(column for column, _ in key)
    values = "_".join(str(value) for _, value in key)
    return f"{columns}:{values}"


def slice_key_in_spec(spec: SlicingSpec, key: SliceKey) -> bool:
    """True if ``key`` is one of the slices ``spec`` can produce."""
    columns = {column for column, _ in key}
    if columns != set(spec.feature_keys) | set(spec.feature_values):
        return False
    values = dict(key)
    return all(value_matches(expected, values[column]) for column, expected in spec.feature_values.items())
