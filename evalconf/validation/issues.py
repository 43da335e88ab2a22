from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Literal, TypeAlias

from ..exceptions import EvalConfigValidationError

IssueCode: TypeAlias = Literal[
    "multiple_baselines",
    "duplicate_model_name",
    "missing_model_name",
    "exclusive_fields",
    "oneof_multiple",
    "aggregation_requires_binarize",
    "unsatisfiable_range",
    "unknown_direction",
    "empty_threshold",
    "invalid_metric_config",
    "missing_class_name",
    "unknown_model_name",
    "dangling_slice",
    "dangling_cross_slice",
    "negative_min_slice_size",
    "unknown_enum_value",
    "invalid_class_id",
    "out_of_range",
    "invalid_structure",
]


@dataclass(frozen=True)
class ConfigIssue:
    code: IssueCode
    path: str
    message: str

    def __str__(self) -> str:
        where = self.path or "<root>"
        return f"[{self.code}] {where}: {self.message}"

    def to_dict(self) -> dict:
        return {"code": self.code, "path": self.path, "message": self.message}


@dataclass
class ValidationReport:
    """All issues found in one validation pass."""

    issues: List[ConfigIssue] = field(default_factory=list)

    def add(self, code: IssueCode, path: str, message: str) -> None:
        self.issues.append(ConfigIssue(code=code, path=path, message=message))

    def extend(self, other: "ValidationReport") -> None:
        self.issues.extend(other.issues)

    @property
    def ok(self) -> bool:
        return not self.issues

    def codes(self) -> List[str]:
        return [issue.code for issue in self.issues]

    def raise_if_invalid(self) -> None:
        if self.issues:
            raise EvalConfigValidationError(self.issues)

    def __iter__(self) -> Iterator[ConfigIssue]:
        return iter(self.issues)
