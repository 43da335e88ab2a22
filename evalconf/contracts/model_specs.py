from __future__ import annotations

from typing import ClassVar, Dict, FrozenSet, Optional

from ..registries.messages import register_message
from .base import SchemaModel, wire
from .choices import DEFAULT_OUTPUT_NAME, ModelTypeName


def _by_output(single: Optional[str], per_output: Dict[str, str]) -> Dict[str, str]:
    if per_output:
        return dict(per_output)
    if single is not None:
        return {DEFAULT_OUTPUT_NAME: single}
    return {}


def key_for_output(keys_by_output: Dict[str, str], output_name: str = DEFAULT_OUTPUT_NAME) -> Optional[str]:
    """Look up the key for an output, falling back to the single-output entry."""
    if output_name in keys_by_output:
        return keys_by_output[output_name]
    return keys_by_output.get(DEFAULT_OUTPUT_NAME)


@register_message("ModelSpec")
class ModelSpec(SchemaModel):
    """
    One model under evaluation.

    Attributes
    ----------
    name:
        Alias distinguishing models when several are evaluated (e.g.
        "candidate" / "baseline"). Optional when the config has a single model;
        in that case no model name appears in metric keys either way.

    model_type:
        One of tf_keras, tf_estimator, tf_lite, tf_js, tf_generic. Unset means
        the loader auto-detects it.

    signature_name / signature_names, label_key / label_keys,
    prediction_key / prediction_keys, example_weight_key / example_weight_keys:
        Singular form for single-output models, plural form keyed by output
        name for multi-output models. Use one or the other, never both. The
        ``*_by_output()`` accessors fold either form into one mapping so
        downstream code has a single path.

    is_baseline:
        True for the baseline model (otherwise candidate). At most one per
        config.
    """

    reserved_numbers: ClassVar[FrozenSet[int]] = frozenset({1})

    name: Optional[str] = wire(2, "string")
    model_type: Optional[ModelTypeName] = wire(12, "string")
    signature_name: Optional[str] = wire(3, "string")
    signature_names: Dict[str, str] = wire(4, "map<string, string>", default_factory=dict)
    label_key: Optional[str] = wire(5, "string")
    label_keys: Dict[str, str] = wire(6, "map<string, string>", default_factory=dict)
    prediction_key: Optional[str] = wire(7, "string")
    prediction_keys: Dict[str, str] = wire(8, "map<string, string>", default_factory=dict)
    example_weight_key: Optional[str] = wire(9, "string")
    example_weight_keys: Dict[str, str] = wire(10, "map<string, string>", default_factory=dict)
    is_baseline: bool = wire(11, "bool", False)

    # (singular, plural) field pairs that are mutually exclusive.
    exclusive_pairs: ClassVar[tuple[tuple[str, str], ...]] = (
        ("signature_name", "signature_names"),
        ("label_key", "label_keys"),
        ("prediction_key", "prediction_keys"),
        ("example_weight_key", "example_weight_keys"),
    )

    def signature_names_by_output(self) -> Dict[str, str]:
        return _by_output(self.signature_name, self.signature_names)

    def label_keys_by_output(self) -> Dict[str, str]:
        return _by_output(self.label_key, self.label_keys)

    def prediction_keys_by_output(self) -> Dict[str, str]:
        return _by_output(self.prediction_key, self.prediction_keys)

    def example_weight_keys_by_output(self) -> Dict[str, str]:
        return _by_output(self.example_weight_key, self.example_weight_keys)

    @property
    def output_names(self) -> list[str]:
        """Output names mentioned by any plural key mapping (sorted)."""
        names: set[str] = set()
        for _, plural in self.exclusive_pairs:
            names.update(getattr(self, plural).keys())
        return sorted(names)
