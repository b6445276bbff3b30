"""Broker factory.

Creates the broker implementation selected by ``Settings.mode``.
"""

from __future__ import annotations

from learner_progress.core.clock import IClock
from learner_progress.core.config import Settings
from learner_progress.core.enums import Mode

from .memory_broker import MemoryTopicBroker
from .redis_broker import RedisTopicBroker


def create_broker(
    settings: Settings,
    clock: IClock | None = None,
) -> MemoryTopicBroker | RedisTopicBroker:
    """Create a broker for the configured mode.

    - MEMORY: MemoryTopicBroker (no external deps, deterministic)
    - REDIS: RedisTopicBroker (persistent, shared across processes)
    """
    topology = settings.broker.topology()
    if settings.mode == Mode.MEMORY:
        return MemoryTopicBroker(topology=topology, clock=clock)
    return RedisTopicBroker(
        topology=topology,
        redis_url=settings.broker.redis_url,
        block_ms=settings.broker.block_ms,
        batch_size=settings.broker.batch_size,
        clock=clock,
    )
