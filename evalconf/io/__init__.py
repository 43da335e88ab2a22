"""Serialization of configuration records and wire-schema tooling."""

from .serialization import (
    from_bytes,
    from_json,
    from_text,
    load_config_file,
    save_config_file,
    to_bytes,
    to_json,
    to_text,
    to_wire_dict,
)
from .schema_evolution import (
    assert_schema_compatible,
    check_reserved_numbers,
    check_schema_compatibility,
    load_schema_snapshot,
    save_schema_snapshot,
    schema_snapshot,
)
