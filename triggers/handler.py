"""
Registered trigger handlers.

A handler wraps one callback together with the leading arguments bound at
registration time. Dispatch arguments are appended after the bound ones.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from triggers.handler_list import HandlerList


class Priority(IntEnum):
    """Named handler priorities (lower = runs earlier)."""

    FIRST = -100
    EARLY = -10
    NORMAL = 0
    LATE = 10
    LAST = 100


class Handler:
    """
    One callback registered against a trigger key.

    Handlers start active and become cancelled through ``cancel()``, through
    their once-flag right before they run, or when their list is cleared.
    Cancellation is terminal. Cancelled handlers are skipped immediately and
    physically removed by the owning list's next purge.

    ``cancel``, ``set_priority`` and ``set_once`` return the handler, so
    registration calls can be chained:

        bus.register_broadcast_handler("saved", notify).set_priority(5).set_once()
    """

    __slots__ = ("_list", "_callback", "_args", "_priority", "_once", "_cancelled", "_sequence")

    def __init__(
        self,
        handler_list: HandlerList,
        callback: Callable[..., Any],
        args: tuple[Any, ...] = (),
        sequence: int = 0,
    ):
        self._list = handler_list
        self._callback = callback
        self._args = tuple(args)
        self._priority = 0
        self._once = False
        self._cancelled = False
        self._sequence = sequence

    # -------------------------------------------------------------------------
    # Invocation (used by HandlerList)
    # -------------------------------------------------------------------------

    def invoke(self, args: tuple[Any, ...] = ()) -> Any:
        """Call the callback with bound arguments followed by ``args``."""
        if self._once:
            self.cancel()
        return self._callback(*self._args, *args)

    def invoke_transform(self, value: Any, args: tuple[Any, ...] = ()) -> Any:
        """Call the callback with ``value`` first, then bound and dispatch arguments."""
        if self._once:
            self.cancel()
        return self._callback(value, *self._args, *args)

    # -------------------------------------------------------------------------
    # Control
    # -------------------------------------------------------------------------

    def cancel(self) -> Handler:
        """Stop the handler from ever running again and queue it for removal."""
        self._cancelled = True
        self._list.queue_purge()
        return self

    def set_priority(self, value: int = 0) -> Handler:
        """Set priority (higher = runs later); the list resorts before next use."""
        self._priority = value
        self._list.queue_priority_update()
        return self

    def set_once(self, value: bool = True) -> Handler:
        """Cancel the handler automatically right before its next run."""
        self._once = value
        return self

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def sequence(self) -> int:
        """Registration position within the owning list."""
        return self._sequence

    @property
    def once(self) -> bool:
        return self._once

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def callback(self) -> Callable[..., Any]:
        return self._callback

    @property
    def args(self) -> tuple[Any, ...]:
        return self._args

    @property
    def key(self) -> Any:
        return self._list.key

    def __repr__(self) -> str:
        name = getattr(self._callback, "__qualname__", repr(self._callback))
        state = "cancelled" if self._cancelled else "active"
        flags = ", once" if self._once else ""
        return f"<Handler {name} priority={self._priority}{flags} {state}>"
