import json
import math

import pytest

from evalconf.contracts import (
    AggregationOptions,
    CrossSlicingSpec,
    EvalConfig,
    EvalConfigAndVersion,
    EvalRun,
    GenericChangeThreshold,
    GenericValueThreshold,
    MetricThreshold,
    ModelSpec,
    Options,
    SlicingSpec,
)
from evalconf.exceptions import EvalConfigDecodeError, EvalConfigError
from evalconf.io import (
    from_bytes,
    from_json,
    from_text,
    load_config_file,
    save_config_file,
    to_bytes,
    to_json,
    to_text,
    to_wire_dict,
)
from evalconf.io.wire import build_file_descriptor_proto, message_class


class TestWireSchema:
    def test_reserved_ranges_and_field_numbers(self):
        fdp = build_file_descriptor_proto()
        messages = {m.name: m for m in fdp.message_type}

        eval_config = messages["EvalConfig"]
        assert sorted(r.start for r in eval_config.reserved_range) == [1, 3, 7]
        assert {f.name: f.number for f in eval_config.field} == {
            "model_specs": 2,
            "slicing_specs": 4,
            "metrics_specs": 5,
            "options": 6,
            "cross_slicing_specs": 8,
        }

    def test_threshold_oneofs_are_independent(self):
        descriptor = message_class("MetricThreshold").DESCRIPTOR
        assert sorted(o.name for o in descriptor.oneofs) == ["validate_absolute", "validate_relative"]

    def test_aggregation_type_oneof(self):
        descriptor = message_class("AggregationOptions").DESCRIPTOR
        assert [f.name for f in descriptor.oneofs_by_name["type"].fields] == [
            "micro_average",
            "macro_average",
            "weighted_macro_average",
        ]

    def test_enums(self):
        fdp = build_file_descriptor_proto()
        enums = {e.name: {v.name: v.number for v in e.value} for e in fdp.enum_type}
        assert enums["MetricDirection"] == {"UNKNOWN": 0, "LOWER_IS_BETTER": 1, "HIGHER_IS_BETTER": 2}
        assert enums["ConfidenceIntervalMethod"]["JACKKNIFE"] == 2


class TestBinary:
    def test_round_trip(self, full_config):
        assert from_bytes(to_bytes(full_config), EvalConfig) == full_config

    @pytest.mark.parametrize(
        "record",
        [
            ModelSpec(),
            SlicingSpec(feature_values={"age": "20"}),
            CrossSlicingSpec(baseline_spec=SlicingSpec()),
            AggregationOptions(micro_average=False),
            Options(include_default_metrics=False, min_slice_size=0),
            MetricThreshold(value_threshold=GenericValueThreshold(lower_bound=float("-inf"), upper_bound=0.0)),
        ],
    )
    def test_round_trip_preserves_presence(self, record):
        assert from_bytes(to_bytes(record), type(record)) == record

    def test_encoding_is_deterministic(self, full_config):
        assert to_bytes(full_config) == to_bytes(full_config.model_copy())

    def test_eval_run_reads_as_config_and_version(self, full_config):
        run = EvalRun(
            eval_config=full_config,
            version="0.1.0",
            data_location="/data",
            file_format="tfrecords",
            model_locations={"candidate": "/m/c"},
        )
        cv = from_bytes(to_bytes(run), EvalConfigAndVersion)
        assert cv == EvalConfigAndVersion(eval_config=full_config, version="0.1.0")

    def test_config_and_version_reads_as_eval_run(self, full_config):
        cv = EvalConfigAndVersion(eval_config=full_config, version="0.1.0")
        run = from_bytes(to_bytes(cv), EvalRun)
        assert run.eval_config == full_config
        assert run.data_location is None
        assert run.model_locations == {}

    def test_shared_fields_encode_identically(self, full_config):
        run = EvalRun(eval_config=full_config, version="1")
        cv = EvalConfigAndVersion(eval_config=full_config, version="1")
        assert to_bytes(run) == to_bytes(cv)

    def test_malformed_bytes(self):
        with pytest.raises(EvalConfigDecodeError):
            from_bytes(b"\xff\xff\xff", EvalConfig)

    def test_unknown_enum_value_is_reported(self):
        msg = message_class("MetricThreshold")()
        msg.change_threshold.direction = 7
        with pytest.raises(EvalConfigDecodeError) as exc:
            from_bytes(msg.SerializeToString(), MetricThreshold)
        assert [i.code for i in exc.value.issues] == ["unknown_enum_value"]
        assert exc.value.issues[0].path == "change_threshold.direction"


class TestJson:
    def test_round_trip(self, full_config):
        assert from_json(to_json(full_config)) == full_config

    def test_uses_declared_field_names(self, full_config):
        data = json.loads(to_json(full_config))
        assert data["model_specs"][0]["label_key"] == "label"
        assert data["options"]["disabled_outputs"] == {"values": ["plots"]}
        assert data["options"]["include_default_metrics"] is False

    def test_non_finite_bounds(self):
        t = MetricThreshold(value_threshold=GenericValueThreshold(upper_bound=float("inf")))
        data = json.loads(to_json(t))
        assert data["value_threshold"]["upper_bound"] == "Infinity"
        assert math.isinf(from_json(to_json(t), MetricThreshold).value_threshold.upper_bound)

    def test_hand_written(self):
        cfg = from_json(
            """
            {
              "model_specs": [{"name": "candidate", "label_key": "label"}],
              "metrics_specs": [{
                "thresholds": {
                  "auc": {"change_threshold": {"direction": "HIGHER_IS_BETTER", "absolute": -0.01}}
                }
              }],
              "options": {"min_slice_size": 5}
            }
            """
        )
        threshold = cfg.metrics_specs[0].thresholds["auc"]
        assert threshold.change_threshold == GenericChangeThreshold(direction="HIGHER_IS_BETTER", absolute=-0.01)
        assert cfg.options.min_slice_size == 5

    def test_unknown_field(self):
        text = '{"model_specs": [{"name": "m", "color": "red"}]}'
        with pytest.raises(EvalConfigDecodeError):
            from_json(text)
        assert from_json(text, ignore_unknown_fields=True).model_specs[0].name == "m"

    def test_wire_dict_omits_unset_fields(self):
        assert to_wire_dict(ModelSpec(name="m")) == {"name": "m", "is_baseline": False}
        assert to_wire_dict(EvalConfig()) == {}


class TestText:
    def test_round_trip(self, full_config):
        assert from_text(to_text(full_config)) == full_config

    def test_hand_written(self):
        cfg = from_text(
            """
            model_specs { name: "candidate" label_key: "label" }
            model_specs { name: "baseline" is_baseline: true }
            slicing_specs {}
            slicing_specs { feature_keys: "country" }
            metrics_specs {
              metrics {
                class_name: "AUC"
                threshold { value_threshold { lower_bound { value: 0.7 } } }
              }
              binarize { class_ids { values: [0, 1] } }
              aggregate { macro_average: true }
            }
            options { confidence_intervals { method: POISSON_BOOTSTRAP } }
            """
        )
        assert cfg.baseline_model_spec().name == "baseline"
        assert cfg.slicing_specs[0].is_overall
        spec = cfg.metrics_specs[0]
        assert spec.metrics[0].threshold.value_threshold.lower_bound == 0.7
        assert spec.binarize.class_ids.values == [0, 1]
        assert spec.aggregate.kind == "macro_average"
        assert cfg.options.confidence_intervals.method == "POISSON_BOOTSTRAP"

    def test_malformed(self):
        with pytest.raises(EvalConfigDecodeError):
            from_text("model_specs { name: ")


class TestFiles:
    @pytest.mark.parametrize("suffix", [".json", ".pbtxt", ".textproto", ".pb"])
    def test_save_and_load(self, tmp_path, full_config, suffix):
        path = save_config_file(full_config, tmp_path / "nested" / f"eval_config{suffix}")
        assert path.exists()
        assert load_config_file(path) == full_config

    def test_eval_run_file(self, tmp_path, full_config):
        run = EvalRun(eval_config=full_config, version="1", data_location="/data")
        path = save_config_file(run, tmp_path / "eval_run.json")
        assert load_config_file(path, EvalRun) == run

    def test_unsupported_suffix(self, tmp_path):
        with pytest.raises(EvalConfigError, match="suffix"):
            save_config_file(EvalConfig(), tmp_path / "config.yaml")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "absent.json")
