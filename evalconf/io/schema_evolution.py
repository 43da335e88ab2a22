"""Schema-evolution checks for the wire schema.

Field numbers are the wire identity of a field. Once shipped a number is never
reassigned; when a field is removed its number moves into the message's
reserved set for good. These helpers turn those rules into checks that can
run in tests or CI against a committed snapshot:

    old = load_schema_snapshot("schema_snapshot.json")
    assert_schema_compatible(old, schema_snapshot())
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..exceptions import SchemaEvolutionError
from ..registries.messages import list_messages

# protobuf limits: 1..2^29-1, with 19000-19999 reserved by the implementation.
MAX_FIELD_NUMBER = (1 << 29) - 1
IMPLEMENTATION_RESERVED = range(19000, 20000)

# {message: {"fields": {number: {"name": str, "type": str}}, "reserved": [int, ...]}}
SchemaSnapshot = Dict[str, Dict[str, Any]]


def schema_snapshot() -> SchemaSnapshot:
    """Current wire layout of every registered message."""
    snapshot: SchemaSnapshot = {}
    for message_name, model in list_messages():
        snapshot[message_name] = {
            "fields": {
                wf.number: {"name": wf.name, "type": wf.proto_type}
                for wf in model.wire_fields()
            },
            "reserved": sorted(model.reserved_numbers),
        }
    return snapshot


def check_reserved_numbers(snapshot: Optional[SchemaSnapshot] = None) -> List[str]:
    """Problems within one schema: reserved numbers in use, duplicates, invalid numbers."""
    snapshot = schema_snapshot() if snapshot is None else snapshot
    problems: List[str] = []
    for message_name, layout in snapshot.items():
        reserved = set(layout.get("reserved", ()))
        names_seen: Dict[str, int] = {}
        for number, field in sorted(layout["fields"].items()):
            name = field["name"]
            if number in reserved:
                problems.append(f"{message_name}.{name} uses reserved field number {number}")
            if not 1 <= number <= MAX_FIELD_NUMBER or number in IMPLEMENTATION_RESERVED:
                problems.append(f"{message_name}.{name} has invalid field number {number}")
            if name in names_seen:
                problems.append(
                    f"{message_name}.{name} declared twice (numbers {names_seen[name]} and {number})"
                )
            names_seen[name] = number
    return problems


def check_schema_compatibility(old: SchemaSnapshot, new: SchemaSnapshot) -> List[str]:
    """Changes from ``old`` to ``new`` that would break readers or writers of ``old``."""
    problems: List[str] = []
    for message_name, old_layout in old.items():
        new_layout = new.get(message_name)
        if new_layout is None:
            problems.append(f"message {message_name} was removed")
            continue

        new_fields = new_layout["fields"]
        new_reserved = set(new_layout.get("reserved", ()))

        for number, field in sorted(old_layout["fields"].items()):
            new_field = new_fields.get(number)
            if new_field is None:
                if number not in new_reserved:
                    problems.append(
                        f"{message_name}.{field['name']} (field {number}) was removed without reserving its number"
                    )
                continue
            if new_field["type"] != field["type"]:
                problems.append(
                    f"{message_name} field {number} changed type "
                    f"{field['type']!r} -> {new_field['type']!r}"
                )
            if new_field["name"] != field["name"]:
                # Binary stays readable; JSON and text (keyed by name) do not.
                problems.append(
                    f"{message_name} field {number} renamed {field['name']!r} -> {new_field['name']!r}"
                )

        for number in old_layout.get("reserved", ()):
            if number in new_fields:
                problems.append(
                    f"{message_name} reserved field number {number} reused by {new_fields[number]['name']!r}"
                )
            elif number not in new_reserved:
                problems.append(f"{message_name} dropped reserved field number {number}")

    problems.extend(check_reserved_numbers(new))
    return problems


def assert_schema_compatible(old: SchemaSnapshot, new: Optional[SchemaSnapshot] = None) -> None:
    problems = check_schema_compatibility(old, schema_snapshot() if new is None else new)
    if problems:
        raise SchemaEvolutionError(problems)


def save_schema_snapshot(path: Union[str, Path], snapshot: Optional[SchemaSnapshot] = None) -> Path:
    snapshot = schema_snapshot() if snapshot is None else snapshot
    path = Path(path)
    # JSON object keys are strings; field numbers are restored on load.
    payload = {
        name: {
            "fields": {str(n): f for n, f in layout["fields"].items()},
            "reserved": list(layout.get("reserved", ())),
        }
        for name, layout in snapshot.items()
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)
    return path


def load_schema_snapshot(path: Union[str, Path]) -> SchemaSnapshot:
    with Path(path).open("r", encoding="utf-8") as f:
        payload = json.load(f)
    return {
        name: {
            "fields": {int(n): f for n, f in layout["fields"].items()},
            "reserved": [int(n) for n in layout.get("reserved", ())],
        }
        for name, layout in payload.items()
    }
