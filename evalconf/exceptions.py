"""Exception types raised by evalconf.

Library code raises these; outer layers (the HTTP backend, CLIs) map them to
their own error responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List

if TYPE_CHECKING:
    from evalconf.validation.issues import ConfigIssue


class EvalConfigError(ValueError):
    """Base class for configuration errors."""


class EvalConfigValidationError(EvalConfigError):
    """Raised when a config violates one or more invariants.

    Carries every issue found, not just the first.
    """

    def __init__(self, issues: Iterable["ConfigIssue"]):
        self.issues: List["ConfigIssue"] = list(issues)
        lines = [f"  - {issue}" for issue in self.issues]
        super().__init__(
            f"Invalid evaluation config ({len(self.issues)} issue(s)):\n" + "\n".join(lines)
        )


class EvalConfigDecodeError(EvalConfigError):
    """Raised when serialized config data cannot be decoded."""

    def __init__(self, message: str, issues: Iterable["ConfigIssue"] = ()):
        self.issues: List["ConfigIssue"] = list(issues)
        super().__init__(message)


class MetricConfigError(EvalConfigError):
    """Raised for malformed MetricConfig.config JSON or unresolvable metric classes."""


class ThresholdEvaluationError(EvalConfigError):
    """Raised when a threshold cannot be evaluated (e.g. UNKNOWN direction)."""


class SchemaEvolutionError(EvalConfigError):
    """Raised when a schema change would break wire compatibility."""

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        super().__init__("Incompatible schema change:\n" + "\n".join(f"  - {p}" for p in self.problems))
