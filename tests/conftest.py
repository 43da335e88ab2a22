import pytest

from evalconf.contracts import (
    AggregationOptions,
    BinarizationOptions,
    ConfidenceIntervalOptions,
    CrossSliceMetricThreshold,
    CrossSlicingSpec,
    EvalConfig,
    GenericChangeThreshold,
    GenericValueThreshold,
    MetricConfig,
    MetricsSpec,
    MetricThreshold,
    ModelSpec,
    Options,
    PerSliceMetricThreshold,
    PerSliceMetricThresholds,
    SlicingSpec,
)


@pytest.fixture
def country_slice():
    return SlicingSpec(feature_keys=["country"])


@pytest.fixture
def age_slice():
    return SlicingSpec(feature_values={"age": "20"})


@pytest.fixture
def auc_threshold():
    return MetricThreshold(
        value_threshold=GenericValueThreshold(lower_bound=0.7),
        change_threshold=GenericChangeThreshold(direction="HIGHER_IS_BETTER", absolute=-0.01),
    )


@pytest.fixture
def full_config(country_slice, age_slice, auc_threshold):
    """A config touching every record type; valid as-is."""
    return EvalConfig(
        model_specs=[
            ModelSpec(name="candidate", model_type="tf_keras", label_key="label", signature_name="serving_default"),
            ModelSpec(
                name="baseline",
                is_baseline=True,
                label_keys={"head_a": "label_a", "head_b": "label_b"},
                prediction_keys={"head_a": "probabilities"},
            ),
        ],
        slicing_specs=[SlicingSpec(), country_slice, age_slice],
        cross_slicing_specs=[
            CrossSlicingSpec(baseline_spec=SlicingSpec(), slicing_specs=[country_slice]),
        ],
        metrics_specs=[
            MetricsSpec(
                metrics=[
                    MetricConfig(class_name="AUC", threshold=auc_threshold),
                    MetricConfig(
                        class_name="Precision",
                        module="my_metrics.custom",
                        config='"name": "precision_at_half", "thresholds": [0.5]',
                        per_slice_thresholds=[
                            PerSliceMetricThreshold(
                                slicing_specs=[age_slice],
                                threshold=MetricThreshold(
                                    value_threshold=GenericValueThreshold(lower_bound=0.5, upper_bound=1.0)
                                ),
                            )
                        ],
                        cross_slice_thresholds=[
                            CrossSliceMetricThreshold(
                                cross_slicing_specs=[
                                    CrossSlicingSpec(baseline_spec=SlicingSpec(), slicing_specs=[country_slice])
                                ],
                                threshold=MetricThreshold(
                                    change_threshold=GenericChangeThreshold(
                                        direction="LOWER_IS_BETTER", relative=0.1
                                    )
                                ),
                            )
                        ],
                    ),
                ],
                model_names=["candidate"],
                output_names=["head_a"],
                binarize=BinarizationOptions(class_ids=[0, 1, 2], top_k_list=[1]),
                aggregate=AggregationOptions(macro_average=True, class_weights={0: 0.5, 1: 2.0}),
                query_key="query_id",
                thresholds={
                    "example_count": MetricThreshold(
                        value_threshold=GenericValueThreshold(lower_bound=100.0)
                    )
                },
                per_slice_thresholds={
                    "loss": PerSliceMetricThresholds(
                        thresholds=[
                            PerSliceMetricThreshold(
                                slicing_specs=[country_slice],
                                threshold=MetricThreshold(
                                    value_threshold=GenericValueThreshold(upper_bound=0.3)
                                ),
                            )
                        ]
                    )
                },
            )
        ],
        options=Options(
            include_default_metrics=False,
            compute_confidence_intervals=True,
            confidence_intervals=ConfidenceIntervalOptions(method="JACKKNIFE"),
            min_slice_size=10,
            disabled_outputs=["plots"],
        ),
    )
