"""Pure helpers operating on parsed configuration records."""

from .config_util import (
    get_baseline_model_spec,
    get_model_spec,
    get_model_type,
    has_baseline,
    make_eval_config_and_version,
    make_eval_run,
    update_eval_config_with_defaults,
)
from .metric_configs import load_metric_class, metric_name, metric_search_modules, parse_metric_config_kwargs
from .slicing import OVERALL_SLICE_KEY, generate_slices, spec_matches, stringify_slice_key
from .thresholds import (
    ThresholdResult,
    check_change_threshold,
    check_metric_threshold,
    check_value_threshold,
)
