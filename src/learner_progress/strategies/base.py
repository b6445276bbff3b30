"""Base credit strategy.

A strategy maps an ``Average`` to an integer credit award.  Strategies
hold no per-call state; the registry hands out one shared instance each.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from learner_progress.domain.average import Average

Tier = tuple[Callable[[float], bool], int]


class CreditStrategy(ABC):
    """Abstract base for credit calculation rules."""

    @abstractmethod
    def calculate_credits(self, average: Average) -> int:
        """Return the credit award for *average* (never negative)."""
        ...

    @abstractmethod
    def name(self) -> str: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name()!r}>"


class ThresholdLadderStrategy(CreditStrategy):
    """Ordered first-match dispatch over ``(predicate, credits)`` tiers.

    Tiers are checked top-down against the rounded average; the first
    predicate that matches decides the award.  No match awards 0.
    """

    tiers: Sequence[Tier] = ()

    def calculate_credits(self, average: Average) -> int:
        for matches, credits in self.tiers:
            if matches(average.value):
                return credits
        return 0
