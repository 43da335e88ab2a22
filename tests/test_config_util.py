from evalconf.contracts import (
    CrossSlicingSpec,
    EvalConfig,
    GenericValueThreshold,
    MetricConfig,
    MetricsSpec,
    MetricThreshold,
    ModelSpec,
    PerSliceMetricThreshold,
    SlicingSpec,
)
from evalconf.core.config_util import (
    get_baseline_model_spec,
    get_model_spec,
    get_model_type,
    has_baseline,
    make_eval_config_and_version,
    make_eval_run,
    update_eval_config_with_defaults,
)
from evalconf.validation import validate_eval_config
from evalconf.version import __version__


def _keys(specs):
    return [s.canonical_key() for s in specs]


class TestModelLookups:
    def test_baseline(self, full_config):
        assert has_baseline(full_config)
        assert get_baseline_model_spec(full_config).name == "baseline"
        assert not has_baseline(EvalConfig(model_specs=[ModelSpec()]))

    def test_model_type(self, full_config):
        assert get_model_type(full_config, "candidate") == "tf_keras"
        assert get_model_type(full_config, "baseline") is None
        assert get_model_type(full_config, "missing") is None
        assert get_model_spec(full_config, "baseline").is_baseline


class TestDefaults:
    def test_empty_slicing_specs_become_overall(self):
        cfg = update_eval_config_with_defaults(EvalConfig())
        assert cfg.slicing_specs == [SlicingSpec()]

    def test_input_is_untouched(self):
        cfg = EvalConfig()
        update_eval_config_with_defaults(cfg)
        assert cfg.slicing_specs == []

    def test_cross_slice_references_are_added(self):
        country = SlicingSpec(feature_keys=["country"])
        cfg = EvalConfig(
            slicing_specs=[SlicingSpec(feature_keys=["age"])],
            cross_slicing_specs=[CrossSlicingSpec(slicing_specs=[country])],
        )
        out = update_eval_config_with_defaults(cfg)
        assert _keys(out.slicing_specs) == _keys(
            [SlicingSpec(feature_keys=["age"]), SlicingSpec(), country]
        )

    def test_per_slice_references_are_added_once(self):
        city = SlicingSpec(feature_keys=["city"])
        threshold = PerSliceMetricThreshold(
            slicing_specs=[city, SlicingSpec(feature_keys=["city"])],
            threshold=MetricThreshold(value_threshold=GenericValueThreshold(lower_bound=0.1)),
        )
        cfg = EvalConfig(
            slicing_specs=[SlicingSpec()],
            metrics_specs=[MetricsSpec(metrics=[MetricConfig(class_name="AUC", per_slice_thresholds=[threshold])])],
        )
        out = update_eval_config_with_defaults(cfg)
        assert _keys(out.slicing_specs) == _keys([SlicingSpec(), city])
        assert validate_eval_config(out).ok

    def test_baseline_added_to_listed_model_names(self):
        cfg = EvalConfig(
            model_specs=[ModelSpec(name="candidate"), ModelSpec(name="base", is_baseline=True)],
            metrics_specs=[MetricsSpec(model_names=["candidate"]), MetricsSpec()],
        )
        out = update_eval_config_with_defaults(cfg)
        assert out.metrics_specs[0].model_names == ["candidate", "base"]
        assert out.metrics_specs[1].model_names == []

    def test_defaults_are_idempotent(self, full_config):
        once = update_eval_config_with_defaults(full_config)
        assert update_eval_config_with_defaults(once) == once


class TestRunRecords:
    def test_version_defaults_to_package_version(self, monkeypatch):
        monkeypatch.delenv("EVALCONF_SCHEMA_VERSION", raising=False)
        assert make_eval_config_and_version(EvalConfig()).version == __version__

    def test_version_from_environment(self, monkeypatch):
        monkeypatch.setenv("EVALCONF_SCHEMA_VERSION", "2024.1")
        run = make_eval_run(EvalConfig(), data_location="/data/eval", file_format="tfrecords")
        assert run.version == "2024.1"
        assert run.data_location == "/data/eval"

    def test_explicit_version_and_locations(self, full_config):
        run = make_eval_run(
            full_config,
            version="7",
            model_locations={"candidate": "/models/c", "baseline": "/models/b"},
        )
        assert run.version == "7"
        assert run.model_locations["baseline"] == "/models/b"
        assert run.eval_config == full_config
