"""Configuration validation (exhaustive; every violation is reported)."""

from .issues import ConfigIssue, IssueCode, ValidationReport
from .validator import (
    report_from_pydantic,
    validate_eval_config,
    validate_eval_config_dict,
    validate_eval_run,
)

__all__ = [
    "ConfigIssue",
    "IssueCode",
    "ValidationReport",
    "report_from_pydantic",
    "validate_eval_config",
    "validate_eval_config_dict",
    "validate_eval_run",
]
