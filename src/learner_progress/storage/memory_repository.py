"""In-memory Learner repository.

Stores detached snapshots: a loaded learner can be mutated freely and
nothing changes in the store until ``save``.  There is no version
check, so two interleaved load/complete/save sequences on the same id
lose one update; callers needing safety must serialise access.
"""

from __future__ import annotations

import itertools
import logging
import threading

from learner_progress.core.errors import LearnerNotFoundError
from learner_progress.domain.learner import Learner

logger = logging.getLogger(__name__)


class InMemoryLearnerRepository:
    def __init__(self) -> None:
        self._rows: dict[int, Learner] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def load(self, learner_id: int) -> Learner:
        with self._lock:
            stored = self._rows.get(learner_id)
        if stored is None:
            raise LearnerNotFoundError(learner_id)
        return stored.snapshot()

    def save(self, learner: Learner) -> Learner:
        """Insert (assigning an id) or overwrite; returns the caller's object."""
        with self._lock:
            if learner.id is None:
                learner.id = next(self._ids)
                logger.debug("Assigned id %d to learner %s", learner.id, learner.name)
            self._rows[learner.id] = learner.snapshot()
        return learner

    def delete(self, learner_id: int) -> None:
        with self._lock:
            if self._rows.pop(learner_id, None) is None:
                raise LearnerNotFoundError(learner_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_all(self) -> list[Learner]:
        with self._lock:
            return [row.snapshot() for _, row in sorted(self._rows.items())]

    def find_by_name(self, name: str) -> Learner | None:
        return next((row for row in self.find_all() if row.name == name), None)

    def find_with_credits_greater_than(self, min_credits: int) -> list[Learner]:
        return [row for row in self.find_all() if row.credit_balance > min_credits]

    def find_with_minimum_courses(self, min_courses: int) -> list[Learner]:
        return [row for row in self.find_all() if row.completed_courses >= min_courses]

    def count_with_minimum_credits(self, min_credits: int) -> int:
        return sum(1 for row in self.find_all() if row.credit_balance >= min_credits)
