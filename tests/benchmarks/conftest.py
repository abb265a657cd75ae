"""Benchmark fixtures and configuration."""
import pytest

from triggers import TriggerBus


@pytest.fixture
def loaded_bus():
    """Bus with 1,000 broadcast and 1,000 transform handlers on one key."""
    bus = TriggerBus()
    for i in range(1000):
        bus.register_broadcast_handler("hot", lambda x, i=i: x + i).set_priority(i % 7)
        bus.register_transform_handler("hot", lambda v: v + 1).set_priority(i % 5)
    return bus
