"""
In-process trigger dispatch.

Register handlers against arbitrary keys and dispatch them as broadcasts,
result-collecting polls or value-transformation chains.
"""

from triggers.bus import (
    TriggerBus,
    clear_key,
    execute_broadcast,
    get_trigger_bus,
    modify_chain,
    poll_broadcast,
    register_broadcast_handler,
    register_transform_handler,
    reset_trigger_bus,
)
from triggers.config import TriggerSettings
from triggers.handler import Handler, Priority
from triggers.handler_list import HandlerList
from triggers.lifecycle import (
    ComponentLifecycle,
    Lifecycle,
    LifecycleError,
    PendingHandler,
    TriggerError,
    bind_handler,
)
from triggers.registry import HandlerKind, Registry

__version__ = "0.1.0"

__all__ = [
    "ComponentLifecycle",
    "Handler",
    "HandlerKind",
    "HandlerList",
    "Lifecycle",
    "LifecycleError",
    "PendingHandler",
    "Priority",
    "Registry",
    "TriggerBus",
    "TriggerError",
    "TriggerSettings",
    "bind_handler",
    "clear_key",
    "execute_broadcast",
    "get_trigger_bus",
    "modify_chain",
    "poll_broadcast",
    "register_broadcast_handler",
    "register_transform_handler",
    "reset_trigger_bus",
]
