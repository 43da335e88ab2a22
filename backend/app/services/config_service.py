from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from evalconf.contracts.eval_config import EvalConfig
from evalconf.contracts.thresholds import MetricThreshold
from evalconf.core.config_util import update_eval_config_with_defaults
from evalconf.core.thresholds import check_metric_threshold
from evalconf.exceptions import EvalConfigValidationError
from evalconf.io.serialization import from_bytes, to_bytes, to_json, to_text, to_wire_dict
from evalconf.validation.validator import validate_eval_config, validate_eval_config_dict

logger = logging.getLogger(__name__)


def validate_config_service(payload: Dict[str, Any], *, apply_defaults: bool = False) -> Dict[str, Any]:
    """
    Validate a raw config mapping and report every issue found.

    With apply_defaults the cross-field checks run on the defaulted config
    (referenced slices auto-added, overall slice filled in), which is what the
    evaluation engine would see.
    """
    cfg, report = validate_eval_config_dict(payload)
    if cfg is not None and apply_defaults:
        cfg = update_eval_config_with_defaults(cfg)
        report = validate_eval_config(cfg)

    logger.info("config validation finished: %d issue(s)", len(report.issues))
    return {
        "ok": report.ok,
        "issues": [issue.to_dict() for issue in report],
        "config": to_wire_dict(cfg) if cfg is not None else None,
    }


def _parse_or_raise(payload: Dict[str, Any]) -> EvalConfig:
    cfg, report = validate_eval_config_dict(payload)
    if cfg is None:
        raise EvalConfigValidationError(report.issues)
    return cfg


def encode_config_service(payload: Dict[str, Any], fmt: str) -> Dict[str, Any]:
    cfg = _parse_or_raise(payload)
    content = to_json(cfg) if fmt == "json" else to_text(cfg)
    return {"format": fmt, "content": content}


def encode_config_binary_service(payload: Dict[str, Any]) -> Tuple[bytes, int]:
    data = to_bytes(_parse_or_raise(payload))
    return data, len(data)


def decode_config_binary_service(data: bytes) -> Dict[str, Any]:
    return to_wire_dict(from_bytes(data, EvalConfig))


def check_threshold_service(
    threshold: MetricThreshold,
    value: float,
    baseline_value: Optional[float] = None,
) -> Dict[str, Any]:
    result = check_metric_threshold(threshold, value, baseline_value)
    return {"passed": result.passed, "failures": result.failures}
