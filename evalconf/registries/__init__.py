"""Registries.

Registries replace hand-maintained lists. The idea is:
- add a new record type
- register it
- everything generated from the registry (wire descriptors, schema
  snapshots, the HTTP schema endpoint) picks it up
"""

from .messages import get_message, list_message_names, list_messages, register_message
