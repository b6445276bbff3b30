"""Consumer handlers for course-completion messages.

Three handlers react to the same ``CourseCompletedEvent`` for different
purposes, each on its own queue:

- ``on_course_completed``  (``course.completed``): certificate + milestone
- ``on_notification``      (``notification.#``): congratulations
- ``on_analytics``         (``analytics.#``): metrics

Handlers are independent: none assumes another has run, and they may
process the same event concurrently.  Event fields are trusted as
already validated.  A failing side effect is raised as ``ConsumerError``
to the broker consume loop, which logs and acknowledges it.

Redelivery duplicates side effects unless an ``IIdempotencyStore`` is
supplied.  Each handler then claims a ``(handler, learner_id,
completed_courses)`` key before acting, skips the delivery if the key
is already held, and releases the key if the side effect fails.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from learner_progress.bus.topology import COURSE_COMPLETED_KEY
from learner_progress.core.enums import QueueOutcome
from learner_progress.core.errors import ConsumerError
from learner_progress.core.interfaces import IBroker, IIdempotencyStore
from learner_progress.domain.events import CourseCompletedEvent
from learner_progress.observability import metrics

from .side_effects import (
    AnalyticsRecorder,
    IAchievementService,
    IAnalyticsRecorder,
    ICertificateIssuer,
    INotifier,
    LoggingAchievementService,
    LoggingCertificateIssuer,
    LoggingNotifier,
)

logger = logging.getLogger(__name__)

# Binding pattern used to find each handler's queue in a topology.
COURSE_COMPLETED_BINDING = COURSE_COMPLETED_KEY
NOTIFICATION_BINDING = "notification.#"
ANALYTICS_BINDING = "analytics.#"


class GamificationEventConsumer:
    def __init__(
        self,
        certificate_issuer: ICertificateIssuer | None = None,
        achievements: IAchievementService | None = None,
        notifier: INotifier | None = None,
        analytics: IAnalyticsRecorder | None = None,
        idempotency_store: IIdempotencyStore | None = None,
    ) -> None:
        self.certificate_issuer = certificate_issuer or LoggingCertificateIssuer()
        self.achievements = achievements or LoggingAchievementService()
        self.notifier = notifier or LoggingNotifier()
        self.analytics = analytics or AnalyticsRecorder()
        self._idempotency = idempotency_store
        # Handler key -> bound queue, for metric labels.
        self._queues: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def on_course_completed(self, event: CourseCompletedEvent) -> None:
        def act() -> None:
            logger.info(
                "Course completed: %s (id=%s) average=%.2f passed=%s courses=%d credits=%d",
                event.learner_name,
                event.learner_id,
                event.course_average,
                event.passed,
                event.completed_courses,
                event.current_credits,
            )
            if event.deserves_certificate():
                self.certificate_issuer.issue(event)
            if event.is_milestone():
                self.achievements.award_milestone(event)

        await self._once("course_completed", event, act)

    async def on_notification(self, event: CourseCompletedEvent) -> None:
        await self._once(
            "notification",
            event,
            lambda: self.notifier.congratulate(
                event, certificate_available=event.deserves_certificate()
            ),
        )

    async def on_analytics(self, event: CourseCompletedEvent) -> None:
        await self._once("analytics", event, lambda: self.analytics.record(event))

    async def _once(
        self, handler: str, event: CourseCompletedEvent, act: Callable[[], None]
    ) -> None:
        key = f"{handler}:{event.dedup_key()}"
        if self._idempotency is not None and not await self._idempotency.add(key):
            metrics.record_handler_outcome(
                self._queues.get(handler, handler), QueueOutcome.DUPLICATE
            )
            logger.info("Skipping duplicate %s delivery for %s", handler, key)
            return
        try:
            act()
        except Exception as exc:
            if self._idempotency is not None:
                await self._idempotency.remove(key)
            raise ConsumerError(
                f"{handler} side effect failed for {key}: {exc}", cause=exc
            ) from exc

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    async def bind(
        self,
        broker: IBroker,
        course_completed_queue: str | None = None,
        notification_queue: str | None = None,
        analytics_queue: str | None = None,
    ) -> dict[str, str]:
        """Subscribe the three handlers; returns ``{queue: handler name}``.

        Queues not named explicitly are found by their binding pattern.
        """
        topology = broker.topology

        def resolve(explicit: str | None, binding: str) -> str:
            if explicit is not None:
                return explicit
            for spec in topology.queues:
                if spec.binding == binding:
                    return spec.name
            raise KeyError(f"No queue bound with {binding!r} on {topology.exchange}")

        self._queues = {
            "course_completed": resolve(course_completed_queue, COURSE_COMPLETED_BINDING),
            "notification": resolve(notification_queue, NOTIFICATION_BINDING),
            "analytics": resolve(analytics_queue, ANALYTICS_BINDING),
        }
        wiring = {
            self._queues["course_completed"]: self.on_course_completed,
            self._queues["notification"]: self.on_notification,
            self._queues["analytics"]: self.on_analytics,
        }
        for queue, handler in wiring.items():
            await broker.subscribe(queue, handler)
            logger.info("Subscribed %s to %s", handler.__name__, queue)
        return {queue: handler.__name__ for queue, handler in wiring.items()}
