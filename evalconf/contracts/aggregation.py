from __future__ import annotations

from typing import ClassVar, Dict, FrozenSet, List, Optional, Tuple

from ..registries.messages import register_message
from .base import Float32, Int32, SchemaModel, wire
from .choices import AggregationKind, BinarizationKind
from .wrappers import RepeatedInt32Value


@register_message("AggregationOptions")
class AggregationOptions(SchemaModel):
    """
    Options for aggregating multi-class / multi-label outputs.

    The three averaging flags form a true single-choice oneof (``type``):
    once one is set, the others must stay unset. They are kept as separate
    optional flags so configs read the same on every format; ``kind`` is the
    tag of the chosen alternative. A flag explicitly set to False still counts
    as chosen, as on the wire.

    micro_average:
        Treat all examples as equal: flatten prediction/label pairs across
        classes and compute as one binary problem. Typical for multi-class.

    macro_average:
        Treat all classes as equal: compute per class, then average. Needs a
        binarization option in the same MetricsSpec to pick the classes.

    weighted_macro_average:
        Macro averaging weighted by each class's ratio of positive labels.
        Also needs binarization options.

    class_weights:
        Weight per class id; 1.0 when a class is not listed. With
        weighted_macro_average these weights are applied on top of the
        positive-label ratio.
    """

    micro_average: Optional[bool] = wire(1, "bool", oneof="type")
    macro_average: Optional[bool] = wire(2, "bool", oneof="type")
    weighted_macro_average: Optional[bool] = wire(3, "bool", oneof="type")
    class_weights: Dict[Int32, Float32] = wire(4, "map<int32, float>", default_factory=dict)

    type_alternatives: ClassVar[Tuple[AggregationKind, ...]] = (
        "micro_average",
        "macro_average",
        "weighted_macro_average",
    )

    def chosen(self) -> List[AggregationKind]:
        """Every alternative of ``type`` that is set (valid configs have at most one)."""
        return [k for k in self.type_alternatives if getattr(self, k) is not None]

    @property
    def kind(self) -> Optional[AggregationKind]:
        chosen = self.chosen()
        return chosen[0] if len(chosen) == 1 else None

    @property
    def requires_binarization(self) -> bool:
        return bool(self.macro_average) or bool(self.weighted_macro_average)

    def class_weight(self, class_id: int) -> float:
        return float(self.class_weights.get(class_id, 1.0))


@register_message("BinarizationOptions")
class BinarizationOptions(SchemaModel):
    """
    Options for turning multi-class / multi-label outputs into binary problems.

    Any subset of the lists may be set; each value produces one binarized
    variant of every metric in the MetricsSpec.

    class_ids:
        One-vs-rest per class id.
    k_list:
        Binary problem from the kth predicted value.
    top_k_list:
        Binary problem from the top k predicted values.
    """

    reserved_numbers: ClassVar[FrozenSet[int]] = frozenset({1, 2, 3})

    class_ids: Optional[RepeatedInt32Value] = wire(4, "RepeatedInt32Value")
    k_list: Optional[RepeatedInt32Value] = wire(5, "RepeatedInt32Value")
    top_k_list: Optional[RepeatedInt32Value] = wire(6, "RepeatedInt32Value")

    option_names: ClassVar[Tuple[BinarizationKind, ...]] = ("class_ids", "k_list", "top_k_list")

    def variants(self) -> List[Tuple[BinarizationKind, int]]:
        """(option, value) for every binarized variant, in declaration order."""
        out: List[Tuple[BinarizationKind, int]] = []
        for name in self.option_names:
            opt = getattr(self, name)
            if opt is None:
                continue
            out.extend((name, v) for v in opt.values)
        return out

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, n) is None for n in self.option_names)
