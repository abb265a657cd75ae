"""
Lifecycle-bound handler registration.

Binds a handler to a host component's lifetime: the handler is registered
when the component becomes ready and cancelled when it is torn down. Until
the ready signal fires there is no real handler yet, so the returned
``PendingHandler`` queues ``set_priority``/``set_once``/``cancel`` calls and
replays them, in order, once the handler exists.

Example:
    lifecycle = ComponentLifecycle("sidebar")
    bus.handles(lifecycle, "theme.changed", sidebar.restyle).set_priority(5)

    lifecycle.ready()      # handler registered, priority 5 applied
    lifecycle.teardown()   # handler cancelled
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Protocol

from triggers.handler import Handler
from triggers.logging_config import get_logger

logger = get_logger(__name__)


class TriggerError(Exception):
    """Base class for trigger errors."""


class LifecycleError(TriggerError):
    """Raised when a lifecycle signal fires out of order or twice."""

    def __init__(self, name: str, signal: str, message: str | None = None):
        self.name = name
        self.signal = signal
        self.message = message or f"Lifecycle '{name}' cannot fire '{signal}' now"
        super().__init__(self.message)


class Lifecycle(Protocol):
    """Host component signals a lifecycle-bound handler attaches to."""

    def on_ready(self, callback: Callable[[], None]) -> None: ...

    def on_teardown(self, callback: Callable[[], None]) -> None: ...


class ComponentLifecycle:
    """
    Minimal host lifecycle with one ready and one teardown signal.

    ``ready()`` may fire once, and never after ``teardown()``. ``teardown()``
    may fire once, with or without a preceding ``ready()``.
    """

    def __init__(self, name: str = "component"):
        self.name = name
        self._ready_callbacks: list[Callable[[], None]] = []
        self._teardown_callbacks: list[Callable[[], None]] = []
        self._ready = False
        self._torn_down = False

    @property
    def is_active(self) -> bool:
        return self._ready and not self._torn_down

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def on_ready(self, callback: Callable[[], None]) -> None:
        self._ready_callbacks.append(callback)

    def on_teardown(self, callback: Callable[[], None]) -> None:
        self._teardown_callbacks.append(callback)

    def ready(self) -> None:
        """Fire the ready signal."""
        if self._ready or self._torn_down:
            raise LifecycleError(self.name, "ready")
        self._ready = True
        for callback in list(self._ready_callbacks):
            callback()

    def teardown(self) -> None:
        """Fire the teardown signal."""
        if self._torn_down:
            raise LifecycleError(self.name, "teardown")
        self._torn_down = True
        for callback in list(self._teardown_callbacks):
            callback()


class PendingState(Enum):
    PENDING = "pending"
    READY = "ready"
    DISCARDED = "discarded"


class PendingHandler:
    """
    Handler placeholder that resolves once its lifecycle is ready.

    While pending, control calls are queued. Once resolved they are applied
    directly to the real handler. A placeholder whose lifecycle was torn
    down before it became ready is discarded and drops all queued calls.
    """

    def __init__(self) -> None:
        self._state = PendingState.PENDING
        self._handler: Handler | None = None
        self._queued: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def state(self) -> PendingState:
        return self._state

    @property
    def handler(self) -> Handler | None:
        return self._handler

    @property
    def resolved(self) -> bool:
        return self._state is PendingState.READY

    @property
    def discarded(self) -> bool:
        return self._state is PendingState.DISCARDED

    def _apply(self, method: str, *args: Any) -> PendingHandler:
        if self._handler is not None:
            getattr(self._handler, method)(*args)
        elif self._state is PendingState.PENDING:
            self._queued.append((method, args))
        return self

    def set_priority(self, value: int = 0) -> PendingHandler:
        return self._apply("set_priority", value)

    def set_once(self, value: bool = True) -> PendingHandler:
        return self._apply("set_once", value)

    def cancel(self) -> PendingHandler:
        return self._apply("cancel")

    def resolve(self, handler: Handler) -> None:
        """Attach the real handler and replay queued calls in order."""
        if self._state is not PendingState.PENDING:
            raise TriggerError(f"Pending handler is already {self._state.value}")
        self._handler = handler
        self._state = PendingState.READY
        queued, self._queued = self._queued, []
        for method, args in queued:
            getattr(handler, method)(*args)

    def discard(self) -> None:
        """Drop queued calls; the handler will never be created."""
        if self._state is PendingState.PENDING:
            self._state = PendingState.DISCARDED
            self._queued.clear()

    def __repr__(self) -> str:
        return f"<PendingHandler {self._state.value} handler={self._handler!r}>"


def bind_handler(
    register: Callable[..., Handler],
    lifecycle: Lifecycle,
    key: Any,
    callback: Callable[..., Any],
    *args: Any,
) -> PendingHandler:
    """
    Register ``callback`` for the lifetime of ``lifecycle``.

    Args:
        register: Registration function, e.g. ``bus.register_broadcast_handler``
        lifecycle: Host lifecycle providing ready/teardown signals
        key: Trigger key
        callback: Handler callback
        *args: Arguments bound before dispatch arguments

    Returns:
        Placeholder that forwards control calls to the handler once it exists
    """
    pending = PendingHandler()

    def _on_ready() -> None:
        if pending.discarded:
            return
        pending.resolve(register(key, callback, *args))

    def _on_teardown() -> None:
        if pending.handler is not None:
            pending.handler.cancel()
        else:
            logger.debug("trigger_pending_handler_discarded", key=repr(key))
            pending.discard()

    lifecycle.on_ready(_on_ready)
    lifecycle.on_teardown(_on_teardown)
    return pending
