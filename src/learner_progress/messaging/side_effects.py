"""Side-effect collaborators called by the consumer handlers.

The defaults only log (and, for analytics, aggregate in process).  Real
certificate, achievement, notification and BI systems plug in through
the same method names.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from learner_progress.domain.events import CourseCompletedEvent
from learner_progress.observability import metrics

logger = logging.getLogger(__name__)


@runtime_checkable
class ICertificateIssuer(Protocol):
    def issue(self, event: CourseCompletedEvent) -> None: ...


@runtime_checkable
class IAchievementService(Protocol):
    def award_milestone(self, event: CourseCompletedEvent) -> None: ...


@runtime_checkable
class INotifier(Protocol):
    def congratulate(
        self, event: CourseCompletedEvent, certificate_available: bool
    ) -> None: ...


@runtime_checkable
class IAnalyticsRecorder(Protocol):
    def record(self, event: CourseCompletedEvent) -> None: ...


class LoggingCertificateIssuer:
    def issue(self, event: CourseCompletedEvent) -> None:
        logger.info(
            "Issuing certificate for %s (id=%s, average=%.2f)",
            event.learner_name,
            event.learner_id,
            event.course_average,
        )


class LoggingAchievementService:
    def award_milestone(self, event: CourseCompletedEvent) -> None:
        logger.info(
            "Milestone: %s completed %d courses",
            event.learner_name,
            event.completed_courses,
        )


class LoggingNotifier:
    def congratulate(
        self, event: CourseCompletedEvent, certificate_available: bool
    ) -> None:
        logger.info(
            "Congratulating %s on completing a course (average=%.2f, certificate=%s)",
            event.learner_name,
            event.course_average,
            "available" if certificate_available else "none",
        )


@dataclass(frozen=True)
class AnalyticsSnapshot:
    completions: int
    passed: int
    mean_average: float

    @property
    def pass_rate(self) -> float:
        return self.passed / self.completions if self.completions else 0.0


class AnalyticsRecorder:
    """Records completion metrics to Prometheus and a running aggregate."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._completions = 0
        self._passed = 0
        self._average_sum = 0.0

    def record(self, event: CourseCompletedEvent) -> None:
        logger.info(
            "Analytics: learner=%s courses=%d credits=%d average=%.2f passed=%s at=%s",
            event.learner_id,
            event.completed_courses,
            event.current_credits,
            event.course_average,
            event.passed,
            event.occurred_at.isoformat(),
        )
        metrics.record_completion(event.course_average, event.passed)
        with self._lock:
            self._completions += 1
            self._passed += int(event.passed)
            self._average_sum += event.course_average

    def snapshot(self) -> AnalyticsSnapshot:
        with self._lock:
            mean = self._average_sum / self._completions if self._completions else 0.0
            return AnalyticsSnapshot(self._completions, self._passed, mean)
