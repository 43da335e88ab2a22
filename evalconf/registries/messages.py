from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Type, TypeVar

from evalconf.registries.base import Registry

if TYPE_CHECKING:
    from evalconf.contracts.base import SchemaModel

M = TypeVar("M", bound="Type[SchemaModel]")

# Wire message name -> schema model class.
_MESSAGES: Registry[str, type] = Registry(_name="messages")

_BUILTINS_LOADED = False


def register_message(name: str) -> Callable[[M], M]:
    """Decorator registering a schema model under its wire message name.

    Every registered model becomes a message in the generated wire schema, so
    the name is part of the text/JSON identity of the type and must not change.
    """

    def deco(cls: M) -> M:
        _MESSAGES.register(name)(cls)
        cls.message_name = name
        return cls

    return deco


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    # Import triggers registration side-effects.
    import evalconf.contracts  # noqa: F401

    _BUILTINS_LOADED = True


def get_message(name: str) -> type:
    _ensure_builtins()
    return _MESSAGES.get(name)


def list_messages() -> list[tuple[str, type]]:
    """All registered messages, in registration order."""
    _ensure_builtins()
    return list(_MESSAGES.items())


def list_message_names() -> list[str]:
    _ensure_builtins()
    return list(_MESSAGES.keys())
