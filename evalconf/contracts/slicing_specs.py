from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..registries.messages import register_message
from .base import SchemaModel, wire

# Order-insensitive identity of a SlicingSpec.
SliceSpecKey = Tuple[Tuple[str, ...], Tuple[Tuple[str, str], ...]]


@register_message("SlicingSpec")
class SlicingSpec(SchemaModel):
    """
    A way to slice the evaluation data.

    Examples:
      - SlicingSpec()
          the overall slice
      - SlicingSpec(feature_keys=["country"])
          one slice per value of "country" ("country:us", "country:jp", ...)
      - SlicingSpec(feature_values={"country": "us"})
          only "country:us"
      - SlicingSpec(feature_keys=["country", "city"])
          every country crossed with every city (may be expensive)
      - SlicingSpec(feature_keys=["country"], feature_values={"age": "20"})
          every country crossed with "age:20"

    Strings in feature_values that look like ints or floats are compared
    against both the string and the numeric form of the feature.
    """

    feature_keys: List[str] = wire(1, "repeated string", default_factory=list)
    feature_values: Dict[str, str] = wire(2, "map<string, string>", default_factory=dict)

    @property
    def is_overall(self) -> bool:
        return not self.feature_keys and not self.feature_values

    def canonical_key(self) -> SliceSpecKey:
        return (
            tuple(sorted(self.feature_keys)),
            tuple(sorted(self.feature_values.items())),
        )

    def matches(self, features: Mapping[str, Any]) -> bool:
        """True if one example with these features falls into (some slice of) this spec."""
        from ..core.slicing import spec_matches

        return spec_matches(self, features)


@register_message("CrossSlicingSpec")
class CrossSlicingSpec(SchemaModel):
    """A baseline slice compared against one or more other slices."""

    baseline_spec: Optional[SlicingSpec] = wire(1, "SlicingSpec")
    slicing_specs: List[SlicingSpec] = wire(2, "repeated SlicingSpec", default_factory=list)

    @property
    def effective_baseline_spec(self) -> SlicingSpec:
        # An unset baseline reads as the overall slice, like any unset message.
        return self.baseline_spec if self.baseline_spec is not None else SlicingSpec()

    def referenced_specs(self) -> List[SlicingSpec]:
        """Baseline first, then the comparison slices."""
        return [self.effective_baseline_spec] + list(self.slicing_specs)

    def canonical_key(self) -> Tuple[SliceSpecKey, Tuple[SliceSpecKey, ...]]:
        return (
            self.effective_baseline_spec.canonical_key(),
            tuple(sorted(s.canonical_key() for s in self.slicing_specs)),
        )
