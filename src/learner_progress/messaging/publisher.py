"""Fan-out publisher for ``CourseCompletedEvent``.

One event becomes up to three sends, described by ``DESTINATIONS``:

===============================  =====================
routing key                      sent when
===============================  =====================
``course.completed``             always
``notification.course.completed``  ``event.passed``
``analytics.gamification``       always
===============================  =====================

Each send is isolated.  A failure is logged and counted, the remaining
sends still run, and ``publish`` never raises.  No retry, no backoff,
no dead-lettering.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from learner_progress.bus.topology import ANALYTICS_KEY, COURSE_COMPLETED_KEY, NOTIFICATION_KEY
from learner_progress.core.interfaces import IBroker
from learner_progress.domain.events import CourseCompletedEvent
from learner_progress.observability import metrics

logger = logging.getLogger(__name__)


def _always(event: CourseCompletedEvent) -> bool:
    return True


def _passed(event: CourseCompletedEvent) -> bool:
    return event.passed


@dataclass(frozen=True)
class Destination:
    routing_key: str
    condition: Callable[[CourseCompletedEvent], bool] = _always


DESTINATIONS: tuple[Destination, ...] = (
    Destination(COURSE_COMPLETED_KEY),
    Destination(NOTIFICATION_KEY, _passed),
    Destination(ANALYTICS_KEY),
)


class EventPublisher:
    """Best-effort publisher.  ``publish`` returns the routing keys that succeeded.

    Parameters
    ----------
    broker:
        Any ``IBroker`` (memory or Redis).
    destinations:
        Ordered ``(routing_key, condition)`` pairs; defaults to ``DESTINATIONS``.
    send_timeout:
        Upper bound in seconds for one send; a slow broker becomes a
        logged failure instead of blocking the caller.
    """

    def __init__(
        self,
        broker: IBroker,
        destinations: tuple[Destination, ...] = DESTINATIONS,
        send_timeout: float = 5.0,
    ) -> None:
        self._broker = broker
        self._destinations = destinations
        self._send_timeout = send_timeout

    @property
    def destinations(self) -> tuple[Destination, ...]:
        return self._destinations

    async def publish(self, event: CourseCompletedEvent) -> list[str]:
        logger.info(
            "Publishing course completion for learner %s (id=%s, passed=%s)",
            event.learner_name,
            event.learner_id,
            event.passed,
        )
        delivered: list[str] = []
        for destination in self._destinations:
            if not destination.condition(event):
                continue
            if await self._send(destination.routing_key, event):
                delivered.append(destination.routing_key)
        return delivered

    async def _send(self, routing_key: str, event: CourseCompletedEvent) -> bool:
        try:
            await asyncio.wait_for(
                self._broker.publish(routing_key, event),
                timeout=self._send_timeout,
            )
        except asyncio.CancelledError:
            raise
        except Exception:
            metrics.record_publish(routing_key, ok=False)
            logger.warning(
                "Send failed on routing_key=%s for learner %s",
                routing_key,
                event.learner_id,
                exc_info=True,
            )
            return False
        metrics.record_publish(routing_key, ok=True)
        logger.debug("Sent %s for learner %s", routing_key, event.learner_id)
        return True
