"""Shared fixtures for the learner-progress test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from learner_progress.application.gamification_service import GamificationService
from learner_progress.bus.memory_broker import MemoryTopicBroker
from learner_progress.bus.topology import Topology
from learner_progress.core.clock import SimClock
from learner_progress.domain.events import CourseCompletedEvent
from learner_progress.messaging.consumer import GamificationEventConsumer
from learner_progress.messaging.publisher import EventPublisher
from learner_progress.storage.memory_repository import InMemoryLearnerRepository


# ---------------------------------------------------------------------------
# Recording collaborators
# ---------------------------------------------------------------------------

class RecordingSideEffects:
    """Stands in for certificate/achievement/notification/analytics systems."""

    def __init__(self) -> None:
        self.certificates: list[CourseCompletedEvent] = []
        self.milestones: list[CourseCompletedEvent] = []
        self.notifications: list[tuple[CourseCompletedEvent, bool]] = []
        self.analytics: list[CourseCompletedEvent] = []

    def issue(self, event: CourseCompletedEvent) -> None:
        self.certificates.append(event)

    def award_milestone(self, event: CourseCompletedEvent) -> None:
        self.milestones.append(event)

    def congratulate(self, event: CourseCompletedEvent, certificate_available: bool) -> None:
        self.notifications.append((event, certificate_available))

    def record(self, event: CourseCompletedEvent) -> None:
        self.analytics.append(event)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sim_clock() -> SimClock:
    return SimClock(start=datetime(2024, 6, 1, tzinfo=timezone.utc))


@pytest.fixture
def topology() -> Topology:
    return Topology.default()


@pytest.fixture
def broker(topology, sim_clock) -> MemoryTopicBroker:
    return MemoryTopicBroker(topology=topology, clock=sim_clock)


@pytest.fixture
def repository() -> InMemoryLearnerRepository:
    return InMemoryLearnerRepository()


@pytest.fixture
def publisher(broker) -> EventPublisher:
    return EventPublisher(broker)


@pytest.fixture
def side_effects() -> RecordingSideEffects:
    return RecordingSideEffects()


@pytest.fixture
def consumer(side_effects) -> GamificationEventConsumer:
    return GamificationEventConsumer(
        certificate_issuer=side_effects,
        achievements=side_effects,
        notifier=side_effects,
        analytics=side_effects,
    )


@pytest.fixture
def service(repository, publisher, sim_clock) -> GamificationService:
    return GamificationService(repository, publisher, clock=sim_clock)


@pytest.fixture
def make_event(sim_clock):
    """Factory for CourseCompletedEvent with sensible defaults."""

    def _make(**overrides) -> CourseCompletedEvent:
        defaults = dict(
            learner_id=1,
            learner_name="Ana Silva",
            completed_courses=1,
            current_credits=3,
            course_average=8.5,
            passed=True,
            clock=sim_clock,
        )
        defaults.update(overrides)
        return CourseCompletedEvent.of(**defaults)

    return _make
