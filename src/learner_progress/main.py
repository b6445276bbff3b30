"""Application bootstrap.

Wires settings, logging, broker, repository, publisher and consumer
for the CLI commands.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import redis.asyncio as aioredis

from .application.gamification_service import GamificationService
from .application.learner_service import LearnerService
from .bus.broker import create_broker
from .core.config import Settings, load_settings
from .core.enums import Mode
from .core.interfaces import IBroker, IIdempotencyStore
from .messaging.consumer import GamificationEventConsumer
from .messaging.publisher import EventPublisher
from .observability.logger import setup_logging
from .observability.metrics import start_metrics_server
from .storage.idempotency import MemoryIdempotencyStore, RedisIdempotencyStore
from .storage.memory_repository import InMemoryLearnerRepository
from .strategies.registry import get_strategy

logger = logging.getLogger(__name__)


@dataclass
class Application:
    settings: Settings
    broker: IBroker
    repository: InMemoryLearnerRepository
    learners: LearnerService
    gamification: GamificationService
    consumer: GamificationEventConsumer


def build_application(settings: Settings) -> Application:
    broker = create_broker(settings)
    repository = InMemoryLearnerRepository()
    publisher = EventPublisher(broker)
    return Application(
        settings=settings,
        broker=broker,
        repository=repository,
        learners=LearnerService(repository),
        gamification=GamificationService(
            repository,
            publisher,
            strategy=get_strategy(settings.credits.strategy),
        ),
        consumer=GamificationEventConsumer(
            idempotency_store=create_idempotency_store(settings),
        ),
    )


def create_idempotency_store(settings: Settings) -> IIdempotencyStore | None:
    """Dedup store for the consumers, or None when disabled (the default)."""
    cfg = settings.broker
    if not cfg.idempotent_consumers:
        return None
    if settings.mode == Mode.MEMORY:
        return MemoryIdempotencyStore()
    return RedisIdempotencyStore(
        aioredis.from_url(cfg.redis_url, decode_responses=True),
        ttl_seconds=cfg.idempotency_ttl_seconds,
    )


async def bind_consumer(app: Application) -> dict[str, str]:
    cfg = app.settings.broker
    return await app.consumer.bind(
        app.broker,
        course_completed_queue=cfg.course_completed_queue,
        notification_queue=cfg.notification_queue,
        analytics_queue=cfg.analytics_queue,
    )


async def run_completions(
    name: str,
    averages: list[float],
    initial_credits: int = 0,
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Register a learner, complete one course per average, return the final view.

    In memory mode the consumers run in-process; in redis mode the
    events are left on the streams for ``run_consumer``.
    """
    settings = load_settings(config_path=config_path, overrides=overrides)
    _setup_logging(settings)
    app = build_application(settings)

    if settings.mode == Mode.MEMORY:
        await bind_consumer(app)
    await app.broker.start()
    try:
        view = app.learners.create_learner(name, initial_credits)
        for average in averages:
            view = await app.gamification.complete_course(view.id, average)
    finally:
        await app.broker.stop()
    return view.model_dump()


async def run_consumer(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> None:
    """Run the three handlers against the configured broker until cancelled."""
    settings = load_settings(config_path=config_path, overrides=overrides)
    _setup_logging(settings)
    start_metrics_server(settings.observability.metrics_port)
    app = build_application(settings)

    wiring = await bind_consumer(app)
    logger.info("Consumers bound: %s", wiring)
    await app.broker.start()
    try:
        await asyncio.Event().wait()
    finally:
        await app.broker.stop()


def _setup_logging(settings: Settings) -> None:
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
