"""Test LearnerService and the request models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from learner_progress.application.dto import (
    CourseCompletionRequest,
    CreateLearnerRequest,
    LearnerView,
)
from learner_progress.application.learner_service import LearnerService
from learner_progress.core.errors import InvalidLearnerError, LearnerNotFoundError


@pytest.fixture
def learners(repository):
    return LearnerService(repository)


def test_create_and_get(learners):
    created = learners.create_learner("Ana Silva", 4)
    assert created == LearnerView(id=1, name="Ana Silva", completed_courses=0, credits=4)
    assert learners.get_learner(1) == created


def test_list(learners):
    learners.create_learner("Ana")
    learners.create_learner("Bruno")
    assert [v.name for v in learners.list_learners()] == ["Ana", "Bruno"]


def test_get_unknown(learners):
    with pytest.raises(LearnerNotFoundError):
        learners.get_learner(7)


def test_create_rejects_blank_name(learners):
    with pytest.raises(InvalidLearnerError):
        learners.create_learner("   ")


def test_view_is_frozen(learners):
    view = learners.create_learner("Ana")
    with pytest.raises(PydanticValidationError):
        view.credits = 100


class TestRequests:
    @pytest.mark.parametrize("average", [0.0, 7.0, 10.0])
    def test_average_in_range(self, average):
        assert CourseCompletionRequest(average=average).average == average

    @pytest.mark.parametrize("average", [-0.01, 10.5])
    def test_average_out_of_range(self, average):
        with pytest.raises(PydanticValidationError):
            CourseCompletionRequest(average=average)

    def test_create_request_bounds(self):
        with pytest.raises(PydanticValidationError):
            CreateLearnerRequest(name="")
        with pytest.raises(PydanticValidationError):
            CreateLearnerRequest(name="Ana", initial_credits=-1)
        assert CreateLearnerRequest(name="Ana").initial_credits == 0
