"""Premium rule: tiered awards that pay at least as much as Standard."""

from __future__ import annotations

from learner_progress.core.enums import StrategyType

from .base import ThresholdLadderStrategy
from .registry import register_strategy

EXCELLENT_THRESHOLD = 9.0
VERY_GOOD_THRESHOLD = 8.0
GOOD_THRESHOLD = 7.0  # exclusive

EXCELLENT_CREDITS = 5
VERY_GOOD_CREDITS = 4
GOOD_CREDITS = 3


@register_strategy(StrategyType.PREMIUM)
class PremiumCreditStrategy(ThresholdLadderStrategy):
    tiers = (
        (lambda v: v >= EXCELLENT_THRESHOLD, EXCELLENT_CREDITS),
        (lambda v: v >= VERY_GOOD_THRESHOLD, VERY_GOOD_CREDITS),
        (lambda v: v > GOOD_THRESHOLD, GOOD_CREDITS),
    )

    def name(self) -> str:
        return "Premium Credit Strategy"
