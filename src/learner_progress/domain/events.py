"""CourseCompletedEvent: the fact that a learner finished a course.

The event is an immutable snapshot built by the application layer after
the Learner has been mutated.  Serialised field names are camelCase so
the JSON matches the broker wire shape (``learnerId``, ``occurredAt``...).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from learner_progress.core.clock import IClock, WallClock
from learner_progress.core.errors import InvalidLearnerError
from learner_progress.core.rules import (
    CERTIFICATE_THRESHOLD,
    COURSE_COMPLETED_EVENT_TYPE,
    MILESTONE_INTERVAL,
)

from .average import Average

if TYPE_CHECKING:
    from .learner import Learner

_WALL_CLOCK = WallClock()


class CourseCompletedEvent(BaseModel):
    """Immutable completion snapshot.

    Equality is structural over every field, ``occurred_at`` included.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    learner_id: int
    learner_name: str
    completed_courses: int
    current_credits: int
    course_average: float
    passed: bool
    occurred_at: datetime
    event_type: Literal["COURSE_COMPLETED"] = COURSE_COMPLETED_EVENT_TYPE

    @classmethod
    def of(
        cls,
        learner_id: int,
        learner_name: str,
        completed_courses: int,
        current_credits: int,
        course_average: Average | float,
        passed: bool,
        clock: IClock | None = None,
    ) -> CourseCompletedEvent:
        """Build the event, stamping ``occurred_at`` from *clock* (wall time by default)."""
        return cls(
            learner_id=learner_id,
            learner_name=learner_name,
            completed_courses=completed_courses,
            current_credits=current_credits,
            course_average=float(course_average),
            passed=passed,
            occurred_at=(clock or _WALL_CLOCK).now(),
        )

    @classmethod
    def from_learner(
        cls,
        learner: Learner,
        average: Average | float,
        passed: bool,
        clock: IClock | None = None,
    ) -> CourseCompletedEvent:
        """Snapshot a saved learner right after ``complete_course``."""
        if learner.id is None:
            raise InvalidLearnerError("Learner must be saved before building its event")
        return cls.of(
            learner_id=learner.id,
            learner_name=learner.name,
            completed_courses=learner.completed_courses,
            current_credits=learner.credit_balance,
            course_average=average,
            passed=passed,
            clock=clock,
        )

    # Derived ------------------------------------------------------------

    def deserves_certificate(self) -> bool:
        """Passed with an average of at least 7.0 (inclusive)."""
        return self.passed and self.course_average >= CERTIFICATE_THRESHOLD

    def is_milestone(self) -> bool:
        """Every fifth course.  Zero counts as a milestone too."""
        return self.completed_courses % MILESTONE_INTERVAL == 0

    def dedup_key(self) -> str:
        """Natural key for a completion: ``learner_id:completed_courses``."""
        return f"{self.learner_id}:{self.completed_courses}"

    # Wire ---------------------------------------------------------------

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_wire(cls, payload: str | bytes) -> CourseCompletedEvent:
        return cls.model_validate_json(payload)
