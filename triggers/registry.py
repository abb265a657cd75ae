"""
Key to handler-list maps.

Hashable keys are looked up by value. Unhashable keys fall back to identity
and are held by the registry for as long as their entry exists, so their
``id()`` cannot be reused while they are registered.
"""

from __future__ import annotations

from collections.abc import Hashable
from enum import Enum
from typing import Any, Iterator

from triggers.handler_list import HandlerList


class HandlerKind(Enum):
    """Which registry map a handler list lives in."""

    BROADCAST = "broadcast"
    TRANSFORM = "transform"


class _KeyMap:
    """Mapping from arbitrary keys to handler lists."""

    def __init__(self) -> None:
        self._by_value: dict[Hashable, HandlerList] = {}
        self._by_identity: dict[int, tuple[Any, HandlerList]] = {}

    @staticmethod
    def _hashable(key: Any) -> bool:
        if not isinstance(key, Hashable):
            return False
        try:
            hash(key)
        except TypeError:
            # e.g. a tuple containing a list
            return False
        return True

    def get(self, key: Any) -> HandlerList | None:
        if self._hashable(key):
            return self._by_value.get(key)
        entry = self._by_identity.get(id(key))
        return entry[1] if entry is not None else None

    def set(self, key: Any, handler_list: HandlerList) -> None:
        if self._hashable(key):
            self._by_value[key] = handler_list
        else:
            self._by_identity[id(key)] = (key, handler_list)

    def pop(self, key: Any) -> HandlerList | None:
        if self._hashable(key):
            return self._by_value.pop(key, None)
        entry = self._by_identity.pop(id(key), None)
        return entry[1] if entry is not None else None

    def keys(self) -> Iterator[Any]:
        yield from self._by_value
        for key, _ in self._by_identity.values():
            yield key

    def lists(self) -> Iterator[HandlerList]:
        yield from self._by_value.values()
        for _, handler_list in self._by_identity.values():
            yield handler_list

    def __len__(self) -> int:
        return len(self._by_value) + len(self._by_identity)


class Registry:
    """
    Two independent key maps: broadcast handlers and transform handlers.

    Entries are created on first registration for a key and removed only
    through ``remove``.
    """

    def __init__(self, eager_clear: bool = True, purge_on_execute: bool = False):
        self._maps = {kind: _KeyMap() for kind in HandlerKind}
        self._eager_clear = eager_clear
        self._purge_on_execute = purge_on_execute

    def get_or_create(self, kind: HandlerKind, key: Any) -> HandlerList:
        """Return the list for ``key``, creating an empty one if needed."""
        key_map = self._maps[kind]
        handler_list = key_map.get(key)
        if handler_list is None:
            handler_list = HandlerList(
                key,
                eager_clear=self._eager_clear,
                purge_on_execute=self._purge_on_execute,
            )
            key_map.set(key, handler_list)
        return handler_list

    def get_existing(self, kind: HandlerKind, key: Any) -> HandlerList | None:
        """Return the list for ``key`` without creating one."""
        return self._maps[kind].get(key)

    def remove(self, kind: HandlerKind, key: Any) -> HandlerList | None:
        """Drop the entry for ``key``, returning the removed list if any."""
        return self._maps[kind].pop(key)

    def keys(self, kind: HandlerKind) -> list[Any]:
        return list(self._maps[kind].keys())

    def lists(self, kind: HandlerKind) -> list[HandlerList]:
        return list(self._maps[kind].lists())

    def count(self, kind: HandlerKind) -> int:
        return len(self._maps[kind])

    def __contains__(self, key: Any) -> bool:
        return any(key_map.get(key) is not None for key_map in self._maps.values())
