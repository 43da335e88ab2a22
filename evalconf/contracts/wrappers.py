from __future__ import annotations

from typing import Any, List

from pydantic import model_validator

from ..registries.messages import register_message
from .base import Int32, SchemaModel, wire


def _wrap_bare_list(data: Any) -> Any:
    # Allow `class_ids: [1, 2]` as shorthand for `class_ids: {values: [1, 2]}`.
    if isinstance(data, (list, tuple)):
        return {"values": list(data)}
    return data


@register_message("RepeatedStringValue")
class RepeatedStringValue(SchemaModel):
    """Repeated string with presence: set-but-empty differs from unset."""

    values: List[str] = wire(1, "repeated string", default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_list(cls, data: Any) -> Any:
        return _wrap_bare_list(data)


@register_message("RepeatedInt32Value")
class RepeatedInt32Value(SchemaModel):
    """Repeated int32 with presence: set-but-empty differs from unset."""

    values: List[Int32] = wire(1, "repeated int32", default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_list(cls, data: Any) -> Any:
        return _wrap_bare_list(data)
