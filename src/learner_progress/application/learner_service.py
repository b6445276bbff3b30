"""Learner lookup and registration."""

from __future__ import annotations

from learner_progress.core.interfaces import ILearnerRepository
from learner_progress.domain.learner import Learner

from .dto import LearnerView


class LearnerService:
    def __init__(self, repository: ILearnerRepository) -> None:
        self._repository = repository

    def list_learners(self) -> list[LearnerView]:
        return [LearnerView.from_learner(learner) for learner in self._repository.find_all()]

    def get_learner(self, learner_id: int) -> LearnerView:
        return LearnerView.from_learner(self._repository.load(learner_id))

    def create_learner(self, name: str, initial_credits: int = 0) -> LearnerView:
        learner = self._repository.save(Learner.create(name, initial_credits))
        return LearnerView.from_learner(learner)
