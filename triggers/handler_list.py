"""
Per-key handler lists.

A list keeps its handlers in registration order until a priority is set.
Ordering and removal of cancelled handlers are both lazy: handlers only flag
the list as dirty, and the list sorts or purges at the start of the next
dispatch that needs it.

Sorting and purging build a new backing list instead of mutating the old
one, so a dispatch pass already in progress keeps iterating the sequence it
started with. Handlers registered while a pass is running are appended to
that same sequence and may or may not be visited by it.
"""

from __future__ import annotations

from typing import Any, Callable

from triggers.handler import Handler


class HandlerList:
    """All handlers registered for one key in one registry map."""

    def __init__(
        self,
        key: Any,
        eager_clear: bool = True,
        purge_on_execute: bool = False,
    ):
        self.key = key
        self._handlers: list[Handler] = []
        self._next_sequence = 0
        self._uses_priorities = False
        self._needs_priority_update = False
        self._needs_purge = False
        self._eager_clear = eager_clear
        self._purge_on_execute = purge_on_execute

    def add(self, callback: Callable[..., Any], args: tuple[Any, ...] = ()) -> Handler:
        """Append a new active handler."""
        handler = Handler(self, callback, args, sequence=self._next_sequence)
        self._next_sequence += 1
        self._handlers.append(handler)

        # A default-priority newcomer can break an order built from priorities
        if self._uses_priorities:
            self.queue_priority_update()

        return handler

    # -------------------------------------------------------------------------
    # Traversals
    # -------------------------------------------------------------------------

    def execute(self, args: tuple[Any, ...] = ()) -> None:
        """Run every active handler, discarding results."""
        if self._needs_priority_update:
            self._resort()
        if self._purge_on_execute:
            self._purge()

        for handler in self._handlers:
            if not handler.cancelled:
                handler.invoke(args)

    def poll(self, args: tuple[Any, ...] = ()) -> list[Any]:
        """Run every active handler and collect results in list order."""
        self._resort()
        self._purge()

        results = []
        for handler in self._handlers:
            if not handler.cancelled:
                results.append(handler.invoke(args))

        # once-handlers and handlers cancelled mid-pass
        self._purge()
        return results

    def modify(self, value: Any, args: tuple[Any, ...] = ()) -> Any:
        """Fold ``value`` through every active handler, left to right."""
        if self._needs_priority_update:
            self._resort()

        result = value
        for handler in self._handlers:
            if not handler.cancelled:
                result = handler.invoke_transform(result, args)
        return result

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Cancel every handler."""
        for handler in self._handlers:
            handler.cancel()

        if self._eager_clear:
            self._handlers = []
            self._needs_purge = False
            self._needs_priority_update = False

    def queue_priority_update(self) -> None:
        self._needs_priority_update = True
        self._uses_priorities = True

    def queue_purge(self) -> None:
        self._needs_purge = True

    def _resort(self) -> None:
        if not self._needs_priority_update:
            return

        self._purge()
        # ties fall back to registration order, not the previous sort order
        self._handlers = sorted(self._handlers, key=lambda h: (h.priority, h.sequence))
        self._needs_priority_update = False

    def _purge(self) -> None:
        if not self._needs_purge:
            return

        self._handlers = [h for h in self._handlers if not h.cancelled]
        self._needs_purge = False

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def needs_purge(self) -> bool:
        return self._needs_purge

    @property
    def needs_priority_update(self) -> bool:
        return self._needs_priority_update

    @property
    def uses_priorities(self) -> bool:
        return self._uses_priorities

    def handlers(self) -> list[Handler]:
        """Snapshot of active handlers in current backing order."""
        return [h for h in self._handlers if not h.cancelled]

    def __len__(self) -> int:
        return sum(1 for h in self._handlers if not h.cancelled)

    def __bool__(self) -> bool:
        return any(not h.cancelled for h in self._handlers)

    def __repr__(self) -> str:
        return f"<HandlerList key={self.key!r} active={len(self)}>"
