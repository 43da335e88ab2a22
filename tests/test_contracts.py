import pytest
from pydantic import ValidationError

from evalconf.contracts import (
    DEFAULT_OUTPUT_NAME,
    AggregationOptions,
    BinarizationOptions,
    CrossSlicingSpec,
    EvalConfig,
    EvalRun,
    MetricConfig,
    MetricsSpec,
    MetricThreshold,
    ModelSpec,
    Options,
    SlicingSpec,
    key_for_output,
)
from evalconf.contracts.thresholds import GenericValueThreshold
from evalconf.registries import get_message, list_message_names


class TestRecords:
    def test_records_are_immutable(self):
        spec = ModelSpec(name="candidate")
        with pytest.raises(ValidationError):
            spec.name = "other"

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            ModelSpec.model_validate({"name": "m", "labelkey": "y"})

    def test_empty_string_means_unset(self):
        spec = ModelSpec(name="", label_key="")
        assert spec.name is None
        assert spec.label_key is None

    def test_unknown_model_type_rejected(self):
        with pytest.raises(ValidationError):
            ModelSpec(model_type="pytorch")

    def test_float_strings_accepted_for_bounds(self):
        t = GenericValueThreshold(lower_bound="-Infinity", upper_bound="0.5")
        assert t.lower_bound == float("-inf")
        assert t.upper_bound == 0.5

    def test_every_record_is_registered(self):
        names = list_message_names()
        for expected in ("ModelSpec", "SlicingSpec", "MetricThreshold", "EvalConfig", "EvalRun"):
            assert expected in names

    def test_lookup_by_wire_name(self):
        assert get_message("EvalConfig") is EvalConfig
        with pytest.raises(KeyError):
            get_message("NoSuchMessage")


class TestModelSpec:
    def test_singular_keys_fold_under_default_output(self):
        spec = ModelSpec(label_key="label", prediction_key="probs")
        assert spec.label_keys_by_output() == {DEFAULT_OUTPUT_NAME: "label"}
        assert spec.prediction_keys_by_output() == {"": "probs"}
        assert spec.signature_names_by_output() == {}

    def test_plural_keys_returned_as_is(self):
        spec = ModelSpec(label_keys={"a": "la", "b": "lb"}, example_weight_keys={"a": "w"})
        assert spec.label_keys_by_output() == {"a": "la", "b": "lb"}
        assert spec.output_names == ["a", "b"]

    def test_key_for_output_falls_back_to_single_output(self):
        single = ModelSpec(label_key="label").label_keys_by_output()
        multi = ModelSpec(label_keys={"head": "y"}).label_keys_by_output()
        assert key_for_output(single, "anything") == "label"
        assert key_for_output(multi, "head") == "y"
        assert key_for_output(multi, "other") is None


class TestSlicingSpec:
    def test_overall(self):
        assert SlicingSpec().is_overall
        assert not SlicingSpec(feature_keys=["a"]).is_overall

    def test_canonical_key_ignores_order(self):
        a = SlicingSpec(feature_keys=["x", "y"], feature_values={"p": "1", "q": "2"})
        b = SlicingSpec(feature_keys=["y", "x"], feature_values={"q": "2", "p": "1"})
        assert a.canonical_key() == b.canonical_key()

    def test_cross_slicing_unset_baseline_reads_as_overall(self):
        cross = CrossSlicingSpec(slicing_specs=[SlicingSpec(feature_keys=["a"])])
        assert cross.effective_baseline_spec.is_overall
        assert cross.canonical_key() == CrossSlicingSpec(
            baseline_spec=SlicingSpec(), slicing_specs=[SlicingSpec(feature_keys=["a"])]
        ).canonical_key()


class TestAggregationAndBinarization:
    def test_kind_is_tag_of_chosen_alternative(self):
        assert AggregationOptions(micro_average=True).kind == "micro_average"
        assert AggregationOptions().kind is None
        assert AggregationOptions(micro_average=True, macro_average=True).kind is None

    def test_false_flag_still_counts_as_chosen(self):
        agg = AggregationOptions(micro_average=False)
        assert agg.chosen() == ["micro_average"]
        assert not agg.requires_binarization

    def test_class_weight_defaults_to_one(self):
        agg = AggregationOptions(class_weights={2: 3.0})
        assert agg.class_weight(2) == 3.0
        assert agg.class_weight(7) == 1.0

    def test_binarization_accepts_bare_lists(self):
        b = BinarizationOptions(class_ids=[1, 2], top_k_list=[3])
        assert b.class_ids.values == [1, 2]
        assert b.variants() == [("class_ids", 1), ("class_ids", 2), ("top_k_list", 3)]

    def test_set_but_empty_differs_from_unset(self):
        assert BinarizationOptions().is_empty
        b = BinarizationOptions(k_list=[])
        assert not b.is_empty
        assert b.variants() == []


class TestOptions:
    def test_defaults_when_unset(self):
        o = Options()
        assert o.include_default_metrics_enabled is True
        assert o.confidence_intervals_enabled is False
        assert o.effective_min_slice_size == 1
        assert not o.is_output_disabled("plots")

    def test_explicit_values(self):
        o = Options(include_default_metrics=False, min_slice_size=0, disabled_outputs=["plots"])
        assert o.include_default_metrics_enabled is False
        assert o.effective_min_slice_size == 0
        assert o.is_output_disabled("plots")
        assert not o.is_output_disabled("metrics")


class TestMetricsSpec:
    def test_metric_names_from_configs_and_maps(self):
        spec = MetricsSpec(
            metrics=[
                MetricConfig(class_name="MeanSquaredError"),
                MetricConfig(class_name="AUC", config='"name": "auc_pr"'),
                MetricConfig(class_name="Bad", config="{not json"),
            ],
            thresholds={"example_count": MetricThreshold(value_threshold=GenericValueThreshold(lower_bound=1))},
        )
        assert spec.metric_names() == ["mean_squared_error", "auc_pr", "example_count"]


class TestEvalConfig:
    def test_model_lookup(self, full_config):
        assert full_config.baseline_model_spec().name == "baseline"
        assert full_config.model_spec("candidate").label_key == "label"
        assert full_config.model_spec("missing") is None
        assert full_config.model_names() == ["candidate", "baseline"]

    def test_single_model_selected_without_name(self):
        cfg = EvalConfig(model_specs=[ModelSpec(label_key="y")])
        assert cfg.model_spec().label_key == "y"
        assert cfg.baseline_model_spec() is None

    def test_effective_options(self):
        assert EvalConfig().effective_options == Options()

    def test_eval_run_as_config_and_version(self, full_config):
        run = EvalRun(eval_config=full_config, version="1.2", data_location="/data")
        cv = run.as_config_and_version()
        assert cv.eval_config == full_config
        assert cv.version == "1.2"


class TestWireRanges:
    @pytest.mark.parametrize("value", [2**31, -(2**31) - 1])
    def test_int32_fields_reject_out_of_range(self, value):
        with pytest.raises(ValidationError):
            Options(min_slice_size=value)
        with pytest.raises(ValidationError):
            BinarizationOptions(class_ids=[value])
        with pytest.raises(ValidationError):
            AggregationOptions(class_weights={value: 1.0})

    def test_int32_limits_accepted(self):
        assert Options(min_slice_size=2**31 - 1).min_slice_size == 2**31 - 1
        assert BinarizationOptions(class_ids=[-(2**31)]).class_ids.values == [-(2**31)]

    def test_class_weight_must_fit_float32(self):
        with pytest.raises(ValidationError):
            AggregationOptions(class_weights={0: 1e39})
        agg = AggregationOptions(class_weights={0: float("inf"), 1: 3.0e38})
        assert agg.class_weight(1) == 3.0e38
