"""Request/response models for the application services."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from learner_progress.core.rules import MAX_GRADE, MIN_GRADE
from learner_progress.domain.learner import Learner


class LearnerView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None
    name: str
    completed_courses: int
    credits: int

    @classmethod
    def from_learner(cls, learner: Learner) -> LearnerView:
        return cls(
            id=learner.id,
            name=learner.name,
            completed_courses=learner.completed_courses,
            credits=learner.credit_balance,
        )


class CourseCompletionRequest(BaseModel):
    average: float = Field(ge=MIN_GRADE, le=MAX_GRADE)


class CreateLearnerRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    initial_credits: int = Field(default=0, ge=0)
