from __future__ import annotations

"""Wire schema generated from the contracts.

The field numbers and wire types declared with ``wire(...)`` on every
registered record are compiled into a protobuf file descriptor at first use,
loaded into a private descriptor pool, and turned into message classes. The
records stay the single source of truth; nothing here is hand-maintained per
message.

Layout of the generated file:

  package evalconf;
  import "google/protobuf/wrappers.proto";
  enum MetricDirection { ... }              // from contracts.choices.ENUM_TYPES
  message ModelSpec { reserved 1; ... }     // one per registered record
"""

import functools
import logging
import re
from typing import Dict, Type

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory, wrappers_pb2
from google.protobuf.message import Message

from ..contracts.base import SchemaModel, WireField
from ..contracts.choices import ENUM_TYPES
from ..registries.messages import list_messages

logger = logging.getLogger(__name__)

PACKAGE = "evalconf"
FILE_NAME = "evalconf/config.proto"

_FDP = descriptor_pb2.FieldDescriptorProto

_SCALAR_TYPES: Dict[str, int] = {
    "string": _FDP.TYPE_STRING,
    "bool": _FDP.TYPE_BOOL,
    "int32": _FDP.TYPE_INT32,
    "int64": _FDP.TYPE_INT64,
    "float": _FDP.TYPE_FLOAT,
    "double": _FDP.TYPE_DOUBLE,
}

_WRAPPER_TYPES = frozenset(
    {
        "google.protobuf.DoubleValue",
        "google.protobuf.BoolValue",
        "google.protobuf.Int32Value",
        "google.protobuf.StringValue",
    }
)

_MAP_RE = re.compile(r"^map<\s*(\w+)\s*,\s*([\w.]+)\s*>$")


def _map_entry_name(field_name: str) -> str:
    # Same convention protoc uses: label_keys -> LabelKeysEntry.
    return "".join(part[:1].upper() + part[1:] for part in field_name.split("_") if part) + "Entry"


def _set_type(field: descriptor_pb2.FieldDescriptorProto, proto_type: str, messages: Dict[str, type]) -> None:
    if proto_type in _SCALAR_TYPES:
        field.type = _SCALAR_TYPES[proto_type]
    elif proto_type in _WRAPPER_TYPES:
        field.type = _FDP.TYPE_MESSAGE
        field.type_name = "." + proto_type
    elif proto_type in ENUM_TYPES:
        field.type = _FDP.TYPE_ENUM
        field.type_name = f".{PACKAGE}.{proto_type}"
    elif proto_type in messages:
        field.type = _FDP.TYPE_MESSAGE
        field.type_name = f".{PACKAGE}.{proto_type}"
    else:
        raise TypeError(f"Unknown wire type {proto_type!r} for field {field.name!r}")


def _add_field(
    msg: descriptor_pb2.DescriptorProto,
    message_name: str,
    wf: WireField,
    messages: Dict[str, type],
    oneofs: Dict[str, int],
) -> None:
    field = msg.field.add(name=wf.name, number=wf.number, json_name=wf.name)

    if wf.is_map:
        m = _MAP_RE.match(wf.proto_type)
        if m is None:
            raise TypeError(f"Malformed map type {wf.proto_type!r} on {message_name}.{wf.name}")
        key_type, value_type = m.groups()
        entry = msg.nested_type.add(name=_map_entry_name(wf.name))
        entry.options.map_entry = True
        key = entry.field.add(name="key", number=1, label=_FDP.LABEL_OPTIONAL, json_name="key")
        _set_type(key, key_type, messages)
        value = entry.field.add(name="value", number=2, label=_FDP.LABEL_OPTIONAL, json_name="value")
        _set_type(value, value_type, messages)
        field.label = _FDP.LABEL_REPEATED
        field.type = _FDP.TYPE_MESSAGE
        field.type_name = f".{PACKAGE}.{message_name}.{entry.name}"
    elif wf.is_repeated:
        field.label = _FDP.LABEL_REPEATED
        _set_type(field, wf.proto_type[len("repeated "):].strip(), messages)
    else:
        field.label = _FDP.LABEL_OPTIONAL
        _set_type(field, wf.proto_type, messages)

    if wf.oneof is not None:
        if wf.oneof not in oneofs:
            oneofs[wf.oneof] = len(msg.oneof_decl)
            msg.oneof_decl.add(name=wf.oneof)
        field.oneof_index = oneofs[wf.oneof]


def build_file_descriptor_proto() -> descriptor_pb2.FileDescriptorProto:
    """Compile every registered record into one FileDescriptorProto."""
    messages = dict(list_messages())

    fdp = descriptor_pb2.FileDescriptorProto(name=FILE_NAME, package=PACKAGE, syntax="proto3")
    fdp.dependency.append(wrappers_pb2.DESCRIPTOR.name)

    for enum_name, values in ENUM_TYPES.items():
        enum = fdp.enum_type.add(name=enum_name)
        for value_name, number in sorted(values.items(), key=lambda kv: kv[1]):
            enum.value.add(name=value_name, number=number)

    for message_name, model in messages.items():
        msg = fdp.message_type.add(name=message_name)
        oneofs: Dict[str, int] = {}
        for wf in model.wire_fields():
            _add_field(msg, message_name, wf, messages, oneofs)
        for number in sorted(model.reserved_numbers):
            msg.reserved_range.add(start=number, end=number + 1)

    return fdp


@functools.lru_cache(maxsize=None)
def _build_pool() -> descriptor_pool.DescriptorPool:
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(wrappers_pb2.DESCRIPTOR.serialized_pb)
    fdp = build_file_descriptor_proto()
    pool.AddSerializedFile(fdp.SerializeToString())
    logger.debug("built wire schema with %d messages", len(fdp.message_type))
    return pool


@functools.lru_cache(maxsize=None)
def message_class(message_name: str) -> Type[Message]:
    """Generated protobuf class for a registered message name."""
    descriptor = _build_pool().FindMessageTypeByName(f"{PACKAGE}.{message_name}")
    return message_factory.GetMessageClass(descriptor)


def message_class_for(model_cls: Type[SchemaModel]) -> Type[Message]:
    if not model_cls.message_name:
        raise TypeError(f"{model_cls.__name__} is not a registered wire message")
    return message_class(model_cls.message_name)
