from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Iterable, Iterator, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class Registry(Generic[K, V]):
    """Small ordered registry mapping keys to values.

    Typical usage:
        MESSAGES = Registry[str, type](_name="messages")

        @MESSAGES.register("ModelSpec")
        class ModelSpec(...):
            ...

        cls = MESSAGES.get("ModelSpec")

    Registration order is preserved, which keeps anything generated from the
    registry (descriptors, schema snapshots) deterministic.
    """

    _items: Dict[K, V] = field(default_factory=dict)
    _name: str = "registry"

    def register(self, key: K) -> Callable[[V], V]:
        def deco(value: V) -> V:
            existing = self._items.get(key)
            if existing is not None and existing is not value:
                raise KeyError(f"{self._name}: duplicate key {key!r}")
            self._items[key] = value
            return value

        return deco

    def get(self, key: K) -> V:
        if key not in self._items:
            raise KeyError(f"{self._name}: unknown key {key!r}")
        return self._items[key]

    def keys(self) -> Iterable[K]:
        return self._items.keys()

    def items(self) -> Iterable[tuple[K, V]]:
        return self._items.items()

    def __contains__(self, key: K) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[K]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
