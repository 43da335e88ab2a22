from __future__ import annotations

import importlib
import json
import logging
import re
from typing import Any, Dict, List

from ..contracts.metrics_specs import MetricConfig
from ..exceptions import MetricConfigError
from ..settings import metric_search_modules as _default_search_modules

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY_1 = re.compile(r"(.)([A-Z][a-z]+)")
_CAMEL_BOUNDARY_2 = re.compile(r"([a-z0-9])([A-Z])")


def parse_metric_config_kwargs(config: str | None) -> Dict[str, Any]:
    """
    Decode MetricConfig.config into constructor kwargs.

    - None / "" / whitespace -> {}
    - '"name": "auc"' (braces omitted) -> {"name": "auc"}
    - '{"name": "auc"}' -> {"name": "auc"}
    """
    if config is None or not config.strip():
        return {}
    text = config.strip()
    if not text.startswith("{"):
        text = "{" + text + "}"
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetricConfigError(f"Invalid JSON in metric config {config!r}: {e.msg}") from e
    if not isinstance(value, dict):
        raise MetricConfigError(f"Metric config must be a JSON object, got {type(value).__name__}")
    return value


def to_snake_case(name: str) -> str:
    """'MeanSquaredError' -> 'mean_squared_error', 'AUC' -> 'auc'."""
    s = _CAMEL_BOUNDARY_1.sub(r"\1_\2", name)
    return _CAMEL_BOUNDARY_2.sub(r"\1_\2", s).lower()


def metric_name(metric_config: MetricConfig) -> str:
    """Name the metric is reported under: config["name"], else snake-cased class_name."""
    kwargs = parse_metric_config_kwargs(metric_config.config)
    name = kwargs.get("name")
    if isinstance(name, str) and name:
        return name
    return to_snake_case(metric_config.class_name or "")


def metric_search_modules(metric_config: MetricConfig) -> List[str]:
    """Modules to search for class_name, in order."""
    if metric_config.module:
        return [metric_config.module]
    return _default_search_modules()


def load_metric_class(metric_config: MetricConfig) -> type:
    """Import the metric class named by ``metric_config`` (loading only)."""
    if not metric_config.class_name:
        raise MetricConfigError("MetricConfig.class_name is required")

    tried: List[str] = []
    for module_name in metric_search_modules(metric_config):
        tried.append(module_name)
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            logger.debug("metric module %s not importable", module_name)
            continue
        cls = getattr(module, metric_config.class_name, None)
        if isinstance(cls, type):
            return cls

    raise MetricConfigError(
        f"Metric class {metric_config.class_name!r} not found in: {', '.join(tried)}"
    )
