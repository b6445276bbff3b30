"""Standard rule: a flat award for any average strictly above the passing grade."""

from __future__ import annotations

from learner_progress.core.enums import StrategyType
from learner_progress.core.rules import CREDITS_PER_APPROVED_COURSE, PASSING_GRADE_THRESHOLD

from .base import ThresholdLadderStrategy
from .registry import register_strategy


@register_strategy(StrategyType.STANDARD)
class StandardCreditStrategy(ThresholdLadderStrategy):
    tiers = (
        (lambda v: v > PASSING_GRADE_THRESHOLD, CREDITS_PER_APPROVED_COURSE),
    )

    def name(self) -> str:
        return "Standard Credit Strategy"
