"""Course completion use case.

Load, complete, save, then publish.  Publishing happens after the save
and is best-effort: a crash between the two loses the event (no outbox).
"""

from __future__ import annotations

import logging

from learner_progress.core.clock import IClock, WallClock
from learner_progress.core.interfaces import ILearnerRepository
from learner_progress.core.rules import PASSING_GRADE_THRESHOLD
from learner_progress.domain.average import Average
from learner_progress.domain.events import CourseCompletedEvent
from learner_progress.messaging.publisher import EventPublisher
from learner_progress.observability.logger import new_trace_id
from learner_progress.strategies.base import CreditStrategy

from .dto import LearnerView

logger = logging.getLogger(__name__)


class GamificationService:
    def __init__(
        self,
        repository: ILearnerRepository,
        publisher: EventPublisher,
        clock: IClock | None = None,
        strategy: CreditStrategy | None = None,
    ) -> None:
        self._repository = repository
        self._publisher = publisher
        self._clock = clock or WallClock()
        self._strategy = strategy

    async def complete_course(
        self, learner_id: int, average: Average | float
    ) -> LearnerView:
        """Apply a course completion and publish the resulting event.

        Raises:
            AverageOutOfRangeError: before anything is loaded.
            LearnerNotFoundError: unknown *learner_id*.
        """
        new_trace_id()
        if not isinstance(average, Average):
            average = Average.of(average)

        learner = self._repository.load(learner_id)
        learner.complete_course(average, self._strategy)
        learner = self._repository.save(learner)

        passed = average.is_above(PASSING_GRADE_THRESHOLD)
        event = CourseCompletedEvent.from_learner(
            learner, average, passed, clock=self._clock
        )
        await self._publisher.publish(event)

        logger.info(
            "Course completed for learner %s (passed=%s, credits=%d)",
            learner.name,
            passed,
            learner.credit_balance,
        )
        return LearnerView.from_learner(learner)
