from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from evalconf.contracts.thresholds import MetricThreshold


class IssueModel(BaseModel):
    code: str
    path: str
    message: str


class ValidateConfigRequest(BaseModel):
    """
    Raw EvalConfig payload to validate.

    The config is taken as a plain mapping so that structural problems (wrong
    types, unknown keys, unknown enum names) come back as issues alongside the
    cross-field ones instead of a generic 422.
    """
    config: Dict[str, Any] = Field(default_factory=dict)
    apply_defaults: bool = False


class ValidateConfigResponse(BaseModel):
    ok: bool
    issues: List[IssueModel] = Field(default_factory=list)
    # Normalized config (with defaults applied when requested); None if it did not parse.
    config: Optional[Dict[str, Any]] = None


class EncodeConfigRequest(BaseModel):
    config: Dict[str, Any] = Field(default_factory=dict)
    format: Literal["json", "text"] = "text"


class EncodeConfigResponse(BaseModel):
    format: Literal["json", "text"]
    content: str


class ThresholdCheckRequest(BaseModel):
    threshold: MetricThreshold
    value: float
    baseline_value: Optional[float] = None


class ThresholdCheckResponse(BaseModel):
    passed: bool
    failures: List[str] = Field(default_factory=list)
