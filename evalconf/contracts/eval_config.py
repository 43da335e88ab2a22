from __future__ import annotations

from typing import ClassVar, Dict, FrozenSet, List, Optional

from ..registries.messages import register_message
from .base import SchemaModel, wire
from .metrics_specs import MetricsSpec
from .model_specs import ModelSpec
from .options import Options
from .slicing_specs import CrossSlicingSpec, SlicingSpec


@register_message("EvalConfig")
class EvalConfig(SchemaModel):
    """
    Root of an evaluation configuration.

    model_specs:
        Models under evaluation; at most one baseline.

    slicing_specs:
        Ways to slice the data; an empty list means the overall slice only.

    cross_slicing_specs:
        Pairs of slices whose outputs are compared. Slices they mention are
        added to slicing_specs when missing (see
        :func:`evalconf.core.config_util.update_eval_config_with_defaults`).

    metrics_specs / options:
        Metrics to compute and run toggles.
    """

    reserved_numbers: ClassVar[FrozenSet[int]] = frozenset({1, 3, 7})

    model_specs: List[ModelSpec] = wire(2, "repeated ModelSpec", default_factory=list)
    slicing_specs: List[SlicingSpec] = wire(4, "repeated SlicingSpec", default_factory=list)
    cross_slicing_specs: List[CrossSlicingSpec] = wire(
        8, "repeated CrossSlicingSpec", default_factory=list
    )
    metrics_specs: List[MetricsSpec] = wire(5, "repeated MetricsSpec", default_factory=list)
    options: Optional[Options] = wire(6, "Options")

    def baseline_model_spec(self) -> Optional[ModelSpec]:
        for spec in self.model_specs:
            if spec.is_baseline:
                return spec
        return None

    def model_spec(self, name: Optional[str] = None) -> Optional[ModelSpec]:
        """ModelSpec by name; with a single model any name (or none) selects it."""
        if len(self.model_specs) == 1 and not name:
            return self.model_specs[0]
        for spec in self.model_specs:
            if spec.name == name:
                return spec
        return None

    def model_names(self) -> List[str]:
        return [spec.name for spec in self.model_specs if spec.name]

    @property
    def effective_options(self) -> Options:
        return self.options if self.options is not None else Options()


@register_message("EvalConfigAndVersion")
class EvalConfigAndVersion(SchemaModel):
    """Config plus the schema version it was written with.

    Shares fields 1 and 2 with EvalRun; a saved EvalRun reads as this type.
    """

    eval_config: Optional[EvalConfig] = wire(1, "EvalConfig")
    version: Optional[str] = wire(2, "string")


@register_message("EvalRun")
class EvalRun(SchemaModel):
    """
    Persisted record of one evaluation run.

    Fields 1 and 2 must stay identical to EvalConfigAndVersion so either shape
    can read what the other wrote.

    data_location / file_format:
        Input data used with the run.

    model_locations:
        On-disk model location keyed by model alias (ModelSpec.name).
    """

    eval_config: Optional[EvalConfig] = wire(1, "EvalConfig")
    version: Optional[str] = wire(2, "string")
    data_location: Optional[str] = wire(3, "string")
    file_format: Optional[str] = wire(4, "string")
    model_locations: Dict[str, str] = wire(5, "map<string, string>", default_factory=dict)

    def as_config_and_version(self) -> EvalConfigAndVersion:
        return EvalConfigAndVersion(eval_config=self.eval_config, version=self.version)
