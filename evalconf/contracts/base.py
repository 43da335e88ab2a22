"""Shared base for all schema records.

Every record is an immutable pydantic model whose fields carry their stable
wire identity (field number + wire type) next to the python type:

    class SlicingSpec(SchemaModel):
        feature_keys: List[str] = wire(1, "repeated string", default_factory=list)

Field numbers are never reassigned once shipped. Numbers of removed fields go
into ``reserved_numbers`` and stay there permanently; the schema-evolution
checks in :mod:`evalconf.io.schema_evolution` enforce that.

Note: contracts should only depend on stdlib + pydantic.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Annotated, Any, ClassVar, FrozenSet, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

# Scalar wire types that accept None as "unset".
_STRING_TYPES = frozenset({"string"})
_FLOAT_TYPES = frozenset({"double", "float", "google.protobuf.DoubleValue"})

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
FLOAT32_MAX = 3.4028234663852886e38


def _check_float32(v: float) -> float:
    # inf and NaN are representable; finite values must fit in a float32.
    if math.isfinite(v) and abs(v) > FLOAT32_MAX:
        raise PydanticCustomError("out_of_range", "value {value} does not fit in a 32-bit float", {"value": v})
    return v


# Range-checked scalars for int32 / float wire fields.
Int32 = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]
Float32 = Annotated[float, AfterValidator(_check_float32)]


@dataclass(frozen=True)
class WireField:
    """Wire metadata of one model field."""

    name: str
    number: int
    proto_type: str
    oneof: Optional[str] = None

    @property
    def is_repeated(self) -> bool:
        return self.proto_type.startswith("repeated ")

    @property
    def is_map(self) -> bool:
        return self.proto_type.startswith("map<")


def wire(
    number: int,
    proto_type: str,
    default: Any = None,
    *,
    oneof: Optional[str] = None,
    **kwargs: Any,
) -> Any:
    """pydantic ``Field`` carrying the wire number and wire type of a field.

    ``proto_type`` uses .proto spelling: ``"string"``, ``"repeated string"``,
    ``"map<string, string>"``, ``"google.protobuf.DoubleValue"``, an enum name
    from ``choices.ENUM_TYPES`` or another registered message name.
    """
    extra = {"field_number": number, "proto_type": proto_type}
    if oneof is not None:
        extra["oneof"] = oneof
    if "default_factory" in kwargs:
        return Field(json_schema_extra=extra, **kwargs)
    return Field(default, json_schema_extra=extra, **kwargs)


class SchemaModel(BaseModel):
    """Base class for configuration records (immutable, strict keys)."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        protected_namespaces=(),
    )

    # Set by @register_message.
    message_name: ClassVar[str] = ""
    # Field numbers permanently retired from this message.
    reserved_numbers: ClassVar[FrozenSet[int]] = frozenset()

    @classmethod
    def wire_fields(cls) -> List[WireField]:
        """Wire metadata for every field, ordered by field number."""
        out: List[WireField] = []
        for name, info in cls.model_fields.items():
            extra = info.json_schema_extra
            if not isinstance(extra, dict) or "field_number" not in extra:
                raise TypeError(f"{cls.__name__}.{name} is missing wire metadata")
            out.append(
                WireField(
                    name=name,
                    number=int(extra["field_number"]),
                    proto_type=str(extra["proto_type"]),
                    oneof=extra.get("oneof"),
                )
            )
        return sorted(out, key=lambda f: f.number)

    @classmethod
    def _wire_type_of(cls, field_name: Optional[str]) -> Optional[str]:
        if field_name is None or field_name not in cls.model_fields:
            return None
        extra = cls.model_fields[field_name].json_schema_extra
        if isinstance(extra, dict):
            return extra.get("proto_type")
        return None

    @field_validator("*", mode="before")
    @classmethod
    def _normalize_wire_scalars(cls, v: Any, info: ValidationInfo) -> Any:
        """
        Bring values into the shape the wire can represent:
        - "" for a string scalar -> None (both mean "unset" on the wire)
        - "Infinity" / "-Infinity" / "NaN" for float fields -> float
        """
        proto_type = cls._wire_type_of(info.field_name)
        if proto_type in _STRING_TYPES and v == "":
            return None
        if proto_type in _FLOAT_TYPES and isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                return v
        return v
