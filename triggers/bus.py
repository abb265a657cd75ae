"""
Trigger bus for in-process, synchronous event dispatch.

Provides:
- Fire-and-forget broadcast (like ``for h in handlers: h(...)``)
- Result-collecting broadcast (like ``map``)
- Value-transformation chains (like ``functools.reduce``)
- Handler priorities, one-shot handlers and cancellation
- Self-keyed trigger functions
- Lifecycle-bound registration
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from triggers.config import TriggerSettings
from triggers.handler import Handler
from triggers.handler_list import HandlerList
from triggers.lifecycle import Lifecycle, PendingHandler, bind_handler
from triggers.logging_config import ensure_logging, get_logger
from triggers.registry import HandlerKind, Registry

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class TriggerBus:
    """
    Central bus holding broadcast and transform handlers by key.

    Keys can be any value. Hashable keys match by value, unhashable keys by
    identity. Dispatching a key nothing was registered for is not an error.

    Handler exceptions are not caught: they abort the rest of the pass and
    propagate to the caller of the dispatch method.

    Example:
        bus = TriggerBus()
        bus.register_broadcast_handler("saved", print, "saved:")
        bus.execute_broadcast("saved", "report.txt")   # saved: report.txt

        bus.register_transform_handler("price", lambda v, rate: v * rate, 1.2)
        bus.modify_chain(100, "price")                   # 120.0
    """

    def __init__(self, settings: TriggerSettings | None = None):
        """
        Initialize trigger bus.

        Args:
            settings: Behaviour switches (defaults when not given)
        """
        self.settings = settings or TriggerSettings()
        self._registry = Registry(
            eager_clear=self.settings.eager_clear,
            purge_on_execute=self.settings.purge_on_execute,
        )
        self._dispatch_depth = 0
        self._last_failure: BaseException | None = None

    @property
    def registry(self) -> Registry:
        return self._registry

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def execute_broadcast(self, key: Any, *args: Any) -> None:
        """
        Run all broadcast handlers for ``key``.

        Args:
            key: Trigger key
            *args: Arguments passed to each handler after its bound arguments
        """
        handler_list = self._registry.get_existing(HandlerKind.BROADCAST, key)
        if handler_list is None:
            return
        self._dispatch("execute", handler_list, handler_list.execute, args)

    def poll_broadcast(self, key: Any, *args: Any) -> list[Any]:
        """
        Run all broadcast handlers for ``key`` and collect their results.

        Args:
            key: Trigger key
            *args: Arguments passed to each handler after its bound arguments

        Returns:
            Handler return values in execution order
        """
        handler_list = self._registry.get_existing(HandlerKind.BROADCAST, key)
        if handler_list is None:
            return []
        return self._dispatch("poll", handler_list, handler_list.poll, args)

    def modify_chain(self, value: Any, key: Any, *args: Any) -> Any:
        """
        Pass ``value`` through all transform handlers for ``key`` in order.

        Args:
            value: Initial value
            key: Trigger key
            *args: Arguments passed to each handler after its bound arguments

        Returns:
            Value returned by the last handler, or ``value`` if none ran
        """
        handler_list = self._registry.get_existing(HandlerKind.TRANSFORM, key)
        if handler_list is None:
            return value
        return self._dispatch("modify", handler_list, handler_list.modify, value, args)

    def __call__(self, key: Any, *args: Any) -> None:
        """Shorthand for ``execute_broadcast``."""
        self.execute_broadcast(key, *args)

    def _dispatch(
        self,
        mode: str,
        handler_list: HandlerList,
        traversal: Callable[..., Any],
        *traversal_args: Any,
    ) -> Any:
        self._dispatch_depth += 1
        try:
            return traversal(*traversal_args)
        except Exception as e:
            # nested dispatches re-raise the same error; log it where it surfaced
            if e is not self._last_failure:
                self._last_failure = e
                logger.warning(
                    "trigger_dispatch_failed",
                    mode=mode,
                    key=repr(handler_list.key),
                    exc_info=True,
                )
            raise
        finally:
            self._dispatch_depth -= 1
            if self._dispatch_depth == 0:
                self._last_failure = None

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_broadcast_handler(
        self, key: Any, callback: Callable[..., Any], *args: Any
    ) -> Handler:
        """
        Register a broadcast handler.

        Args:
            key: Trigger key
            callback: Handler function
            *args: Arguments passed before dispatch arguments

        Returns:
            The new handler
        """
        return self._register(HandlerKind.BROADCAST, key, callback, args)

    def register_transform_handler(
        self, key: Any, callback: Callable[..., Any], *args: Any
    ) -> Handler:
        """
        Register a transform handler.

        The callback receives the running value first, then bound and dispatch
        arguments, and returns the next running value.

        Args:
            key: Trigger key
            callback: Transform function
            *args: Arguments passed after the value and before dispatch arguments

        Returns:
            The new handler
        """
        return self._register(HandlerKind.TRANSFORM, key, callback, args)

    def _register(
        self,
        kind: HandlerKind,
        key: Any,
        callback: Callable[..., Any],
        args: tuple[Any, ...],
    ) -> Handler:
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")

        handler_list = self._registry.get_or_create(kind, key)
        handler = handler_list.add(callback, args)

        logger.debug(
            "trigger_handler_registered",
            kind=kind.value,
            key=repr(key),
            handler=getattr(callback, "__qualname__", repr(callback)),
        )
        return handler

    def on(self, key: Any, callback: Callable[..., Any], *args: Any) -> Handler:
        """Shorthand for ``register_broadcast_handler``."""
        return self.register_broadcast_handler(key, callback, *args)

    def once(self, key: Any, callback: Callable[..., Any], *args: Any) -> Handler:
        """Register a broadcast handler that runs at most once."""
        return self.register_broadcast_handler(key, callback, *args).set_once()

    def handler(self, key: Any, priority: int = 0, once: bool = False) -> Callable[[F], F]:
        """
        Register the decorated function as a broadcast handler.

        Usage:
            @bus.handler("app.ready", priority=-10)
            def warm_cache():
                ...
        """

        def decorator(fn: F) -> F:
            registered = self.register_broadcast_handler(key, fn)
            if priority:
                registered.set_priority(priority)
            registered.set_once(once)
            return fn

        return decorator

    def modifier(self, key: Any, priority: int = 0, once: bool = False) -> Callable[[F], F]:
        """Register the decorated function as a transform handler."""

        def decorator(fn: F) -> F:
            registered = self.register_transform_handler(key, fn)
            if priority:
                registered.set_priority(priority)
            registered.set_once(once)
            return fn

        return decorator

    # -------------------------------------------------------------------------
    # Lifecycle-bound registration
    # -------------------------------------------------------------------------

    def handles(
        self,
        lifecycle: Lifecycle,
        key: Any,
        callback: Callable[..., Any],
        *args: Any,
    ) -> PendingHandler:
        """Register a broadcast handler for the lifetime of ``lifecycle``."""
        return bind_handler(
            self.register_broadcast_handler, lifecycle, key, callback, *args
        )

    def modifies(
        self,
        lifecycle: Lifecycle,
        key: Any,
        callback: Callable[..., Any],
        *args: Any,
    ) -> PendingHandler:
        """Register a transform handler for the lifetime of ``lifecycle``."""
        return bind_handler(
            self.register_transform_handler, lifecycle, key, callback, *args
        )

    # -------------------------------------------------------------------------
    # Self-keyed triggers
    # -------------------------------------------------------------------------

    def create_trigger(self) -> Callable[..., None]:
        """Return a function that broadcasts using itself as the key."""

        def trigger(*args: Any) -> None:
            self.execute_broadcast(trigger, *args)

        return trigger

    def create_poll(self) -> Callable[..., list[Any]]:
        """Return a function that polls using itself as the key."""

        def trigger(*args: Any) -> list[Any]:
            return self.poll_broadcast(trigger, *args)

        return trigger

    def create_modification(self) -> Callable[..., Any]:
        """Return a function that runs a transform chain using itself as the key."""

        def trigger(value: Any, *args: Any) -> Any:
            return self.modify_chain(value, trigger, *args)

        return trigger

    # -------------------------------------------------------------------------
    # Clearing
    # -------------------------------------------------------------------------

    def clear_key(self, key: Any) -> None:
        """
        Cancel all handlers for ``key`` and forget its lists.

        Later registrations for ``key`` start from fresh, empty lists.
        """
        removed = 0
        for kind in HandlerKind:
            handler_list = self._registry.get_existing(kind, key)
            if handler_list is None:
                continue
            removed += len(handler_list)
            handler_list.clear()
            self._registry.remove(kind, key)

        logger.debug("trigger_key_cleared", key=repr(key), cancelled=removed)

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        """Get trigger bus statistics."""
        stats: dict[str, Any] = {}
        for kind in HandlerKind:
            lists = self._registry.lists(kind)
            stats[kind.value] = {
                "keys": len(lists),
                "handlers": sum(len(handler_list) for handler_list in lists),
            }
        return stats


# =============================================================================
# Global Instance
# =============================================================================

_trigger_bus: TriggerBus | None = None


def get_trigger_bus() -> TriggerBus:
    """Get or create the global trigger bus instance."""
    global _trigger_bus
    if _trigger_bus is None:
        settings = TriggerSettings.from_env()
        ensure_logging(settings)
        _trigger_bus = TriggerBus(settings)
    return _trigger_bus


def reset_trigger_bus() -> None:
    """Drop the global trigger bus; the next access builds a new one."""
    global _trigger_bus
    _trigger_bus = None


# =============================================================================
# Convenience Functions
# =============================================================================


def execute_broadcast(key: Any, *args: Any) -> None:
    """Run `execute_broadcast` on the global bus."""
    get_trigger_bus().execute_broadcast(key, *args)


def poll_broadcast(key: Any, *args: Any) -> list[Any]:
    """Run `poll_broadcast` on the global bus."""
    return get_trigger_bus().poll_broadcast(key, *args)


def modify_chain(value: Any, key: Any, *args: Any) -> Any:
    """Run `modify_chain` on the global bus."""
    return get_trigger_bus().modify_chain(value, key, *args)


def register_broadcast_handler(key: Any, callback: Callable[..., Any], *args: Any) -> Handler:
    """Run `register_broadcast_handler` on the global bus."""
    return get_trigger_bus().register_broadcast_handler(key, callback, *args)


def register_transform_handler(key: Any, callback: Callable[..., Any], *args: Any) -> Handler:
    """Run `register_transform_handler` on the global bus."""
    return get_trigger_bus().register_transform_handler(key, callback, *args)


def clear_key(key: Any) -> None:
    """Run `clear_key` on the global bus."""
    get_trigger_bus().clear_key(key)
