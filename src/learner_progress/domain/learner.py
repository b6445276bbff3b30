"""Learner aggregate root.

Owns the completed-course counter and the credit balance.  State only
changes through ``complete_course``, ``add_credits`` and
``deduct_credits``.  The aggregate never publishes events; the
application layer builds and publishes them after saving.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from learner_progress.core.errors import InvalidLearnerError

from .average import Average
from .credits import Credits

if TYPE_CHECKING:
    from learner_progress.strategies.base import CreditStrategy

logger = logging.getLogger(__name__)


class Learner:
    """Aggregate root.  Identity is the externally assigned ``id``.

    Invariants: ``completed_courses`` never decreases; ``credits`` is
    never negative (enforced by ``Credits``).
    """

    def __init__(
        self,
        name: str,
        credits: Credits | int = 0,
        completed_courses: int = 0,
        id: int | None = None,
    ) -> None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidLearnerError("Learner name must be a non-empty string")
        if completed_courses < 0:
            raise InvalidLearnerError(
                f"completed_courses cannot be negative: {completed_courses}"
            )
        self.id = id
        self._name = name
        self._completed_courses = completed_courses
        self._credits = credits if isinstance(credits, Credits) else Credits.of(credits)

    @classmethod
    def create(cls, name: str, initial_credits: int = 0) -> Learner:
        """New learner with no completed courses."""
        return cls(name=name, credits=Credits.of(initial_credits))

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def completed_courses(self) -> int:
        return self._completed_courses

    @property
    def credits(self) -> Credits:
        return self._credits

    @property
    def credit_balance(self) -> int:
        return self._credits.amount

    # ------------------------------------------------------------------
    # Business operations
    # ------------------------------------------------------------------

    def complete_course(
        self,
        average: Average | float,
        strategy: CreditStrategy | None = None,
    ) -> int:
        """Record a completed course and award credits.

        A raw number is wrapped with ``Average.of`` (its validation error
        propagates before any state changes).  The award comes from
        *strategy*, or the registry default (Standard) when omitted.

        Returns the number of credits awarded.
        """
        if not isinstance(average, Average):
            average = Average.of(average)
        if strategy is None:
            from learner_progress.strategies.registry import default_strategy

            strategy = default_strategy()
        awarded = strategy.calculate_credits(average)

        self._completed_courses += 1
        if awarded > 0:
            self._credits = self._credits.add(awarded)

        logger.debug(
            "Learner %s completed course #%d with %s (%s): +%d credits",
            self.id,
            self._completed_courses,
            average,
            strategy.name(),
            awarded,
        )
        return awarded

    def add_credits(self, amount: int) -> None:
        """Manual credit grant (bonus, promotion)."""
        self._credits = self._credits.add(amount)

    def deduct_credits(self, amount: int) -> None:
        """Spend credits.  Raises ``InsufficientCreditsError`` unchanged."""
        self._credits = self._credits.subtract(amount)

    def has_enough_credits(self, required: int) -> bool:
        return self._credits.has_at_least(required)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def snapshot(self) -> Learner:
        """Detached copy for persistence collaborators."""
        return copy.copy(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Learner):
            return NotImplemented
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id) if self.id is not None else id(self)

    def __repr__(self) -> str:
        return (
            f"Learner(id={self.id!r}, name={self._name!r}, "
            f"completed_courses={self._completed_courses}, "
            f"credits={self._credits.amount})"
        )
