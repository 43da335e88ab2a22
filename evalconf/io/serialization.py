"""Encoding and decoding of configuration records.

Three formats, all derived from the same wire schema (:mod:`evalconf.io.wire`):

- binary: the compact wire format, keyed by field number
- JSON:   the proto3 JSON mapping, keys spelled as the record field names
- text:   the protobuf text format, the customary hand-authored form

Because everything goes through field numbers, records that share field
numbers share encodings: an EvalRun holding only eval_config and version
encodes to the same bytes as the equivalent EvalConfigAndVersion, and each
decodes as the other (fields unknown to the reader are skipped).

Round trip: ``from_bytes(to_bytes(x), type(x)) == x`` for every record.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Dict, Type, TypeVar, Union

from google.protobuf import json_format, text_format
from google.protobuf.message import DecodeError, Message
from pydantic import ValidationError

from ..contracts.base import SchemaModel
from ..contracts.eval_config import EvalConfig
from ..exceptions import EvalConfigDecodeError, EvalConfigError
from ..validation.validator import report_from_pydantic
from .wire import message_class_for

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=SchemaModel)

JSON_SUFFIXES = (".json",)
TEXT_SUFFIXES = (".pbtxt", ".textproto", ".txt")
BINARY_SUFFIXES = (".pb", ".bin")


# -----------------------------
# records <-> protobuf messages
# -----------------------------

def _plain(value: Any) -> Any:
    if isinstance(value, SchemaModel):
        return to_wire_dict(value)
    if isinstance(value, float) and not math.isfinite(value):
        # The JSON mapping spells non-finite doubles as strings.
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    return value


def to_wire_dict(record: SchemaModel) -> Dict[str, Any]:
    """Record as a proto3-JSON-shaped dict (unset and empty fields omitted)."""
    out: Dict[str, Any] = {}
    for wf in type(record).wire_fields():
        value = getattr(record, wf.name)
        if value is None:
            continue
        if wf.is_map:
            if value:
                out[wf.name] = {str(k): _plain(v) for k, v in value.items()}
        elif wf.is_repeated:
            if value:
                out[wf.name] = [_plain(v) for v in value]
        else:
            out[wf.name] = _plain(value)
    return out


def to_message(record: SchemaModel) -> Message:
    msg = message_class_for(type(record))()
    try:
        json_format.ParseDict(to_wire_dict(record), msg)
    except json_format.ParseError as e:
        raise EvalConfigError(f"Cannot encode {type(record).__name__}: {e}") from e
    return msg


def from_message(msg: Message, model_cls: Type[M]) -> M:
    data = json_format.MessageToDict(msg, preserving_proto_field_name=True)
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        report = report_from_pydantic(e)
        raise EvalConfigDecodeError(
            f"Decoded data is not a valid {model_cls.__name__} ({len(report.issues)} issue(s))",
            issues=report.issues,
        ) from e


# -----------------------------
# binary
# -----------------------------

def to_bytes(record: SchemaModel) -> bytes:
    return to_message(record).SerializeToString(deterministic=True)


def from_bytes(data: bytes, model_cls: Type[M] = EvalConfig) -> M:
    msg = message_class_for(model_cls)()
    try:
        msg.ParseFromString(data)
    except DecodeError as e:
        raise EvalConfigDecodeError(f"Malformed {model_cls.__name__} bytes: {e}") from e
    return from_message(msg, model_cls)


# -----------------------------
# JSON
# -----------------------------

def to_json(record: SchemaModel, *, indent: int = 2) -> str:
    return json_format.MessageToJson(
        to_message(record),
        preserving_proto_field_name=True,
        indent=indent,
        sort_keys=True,
    )


def from_json(text: Union[str, bytes], model_cls: Type[M] = EvalConfig, *, ignore_unknown_fields: bool = False) -> M:
    msg = message_class_for(model_cls)()
    try:
        json_format.Parse(text, msg, ignore_unknown_fields=ignore_unknown_fields)
    except json_format.ParseError as e:
        raise EvalConfigDecodeError(f"Malformed {model_cls.__name__} JSON: {e}") from e
    return from_message(msg, model_cls)


# -----------------------------
# text format
# -----------------------------

def to_text(record: SchemaModel) -> str:
    return text_format.MessageToString(to_message(record))


def from_text(text: str, model_cls: Type[M] = EvalConfig) -> M:
    msg = message_class_for(model_cls)()
    try:
        text_format.Parse(text, msg)
    except text_format.ParseError as e:
        raise EvalConfigDecodeError(f"Malformed {model_cls.__name__} text: {e}") from e
    return from_message(msg, model_cls)


# -----------------------------
# files
# -----------------------------

def _format_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in TEXT_SUFFIXES:
        return "text"
    if suffix in BINARY_SUFFIXES:
        return "binary"
    raise EvalConfigError(
        f"Unsupported config file suffix {suffix!r} "
        f"(expected one of {JSON_SUFFIXES + TEXT_SUFFIXES + BINARY_SUFFIXES})"
    )


def load_config_file(path: Union[str, Path], model_cls: Type[M] = EvalConfig) -> M:
    """Read a record from a file; the suffix picks the format."""
    path = Path(path).expanduser()
    fmt = _format_for(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.debug("loading %s from %s (%s)", model_cls.__name__, path, fmt)
    if fmt == "binary":
        return from_bytes(path.read_bytes(), model_cls)
    text = path.read_text(encoding="utf-8")
    if fmt == "json":
        return from_json(text, model_cls)
    return from_text(text, model_cls)


def save_config_file(record: SchemaModel, path: Union[str, Path]) -> Path:
    """Write a record to a file; the suffix picks the format."""
    path = Path(path).expanduser()
    fmt = _format_for(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "binary":
        path.write_bytes(to_bytes(record))
    elif fmt == "json":
        path.write_text(to_json(record), encoding="utf-8")
    else:
        path.write_text(to_text(record), encoding="utf-8")
    logger.debug("wrote %s to %s (%s)", type(record).__name__, path, fmt)
    return path
