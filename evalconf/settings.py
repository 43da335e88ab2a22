"""Environment-driven settings.

Values are read at call time so tests and long-running services pick up
changes without re-importing.
"""

from __future__ import annotations

import os
from typing import List

from evalconf.version import __version__

DEFAULT_METRIC_MODULES = ("tfma.metrics", "tf.keras.metrics")


def metric_search_modules() -> List[str]:
    """Namespaces searched (in order) for a MetricConfig.class_name without a module."""
    raw = os.getenv("EVALCONF_METRIC_MODULES", "")
    modules = [m.strip() for m in raw.split(",") if m.strip()]
    return modules or list(DEFAULT_METRIC_MODULES)


def default_schema_version() -> str:
    """Version stamped on EvalRun / EvalConfigAndVersion records when none is given."""
    return os.getenv("EVALCONF_SCHEMA_VERSION", "").strip() or __version__


def extra_cors_origins() -> List[str]:
    return [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
