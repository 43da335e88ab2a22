from __future__ import annotations

"""Literal-based "choice" types used across schemas.

This module centralizes the small enumerations (TypeAlias + Literal) that are
shared across multiple schema modules, together with the wire numbers of the
enum-typed ones.

Design intent:
- Keep this file dependency-free (stdlib + typing only).
- Prefer importing choice sets from here rather than repeating Literal[...] in
  multiple schema files.
"""

from typing import Dict, Literal, TypeAlias


# -----------------------------
# Models
# -----------------------------

# Stored as a plain string on the wire; unset means "auto-detect".
ModelTypeName: TypeAlias = Literal[
    "tf_keras",
    "tf_estimator",
    "tf_lite",
    "tf_js",
    "tf_generic",
]

# Output name used for the singular form of the signature/label/prediction/
# example-weight keys once they are folded into a per-output mapping.
DEFAULT_OUTPUT_NAME = ""


# -----------------------------
# Thresholds
# -----------------------------

MetricDirectionName: TypeAlias = Literal[
    "UNKNOWN",
    "LOWER_IS_BETTER",
    "HIGHER_IS_BETTER",
]


# -----------------------------
# Confidence intervals
# -----------------------------

ConfidenceIntervalMethodName: TypeAlias = Literal[
    "UNKNOWN_CONFIDENCE_INTERVAL_METHOD",
    "POISSON_BOOTSTRAP",
    "JACKKNIFE",
]


# -----------------------------
# Aggregation
# -----------------------------

AggregationKind: TypeAlias = Literal[
    "micro_average",
    "macro_average",
    "weighted_macro_average",
]

BinarizationKind: TypeAlias = Literal["class_ids", "k_list", "top_k_list"]


# -----------------------------
# Outputs
# -----------------------------

# Known artifact names for Options.disabled_outputs (others are allowed).
OutputArtifactName: TypeAlias = Literal[
    "metrics",
    "plots",
    "analysis",
    "eval_config.json",
    "validations",
]


# -----------------------------
# Enum wire numbers
# -----------------------------

# Keyed by the enum's wire type name. Value names must stay unique across all
# enums (they share one scope on the wire).
ENUM_TYPES: Dict[str, Dict[str, int]] = {
    "MetricDirection": {
        "UNKNOWN": 0,
        "LOWER_IS_BETTER": 1,
        "HIGHER_IS_BETTER": 2,
    },
    "ConfidenceIntervalMethod": {
        "UNKNOWN_CONFIDENCE_INTERVAL_METHOD": 0,
        "POISSON_BOOTSTRAP": 1,
        "JACKKNIFE": 2,
    },
}


__all__ = [
    "ModelTypeName",
    "DEFAULT_OUTPUT_NAME",
    "MetricDirectionName",
    "ConfidenceIntervalMethodName",
    "AggregationKind",
    "BinarizationKind",
    "OutputArtifactName",
    "ENUM_TYPES",
]
