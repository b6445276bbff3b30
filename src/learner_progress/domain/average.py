"""Average value object: a validated course score in [0.0, 10.0]."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from learner_progress.core.enums import PerformanceLevel
from learner_progress.core.errors import AverageOutOfRangeError
from learner_progress.core.rules import GRADE_DECIMALS, MAX_GRADE, MIN_GRADE

_QUANTUM = Decimal(1).scaleb(-GRADE_DECIMALS)

# First match wins; evaluated top-down.
_LEVEL_LADDER: tuple[tuple[Callable[[float], bool], PerformanceLevel], ...] = (
    (lambda v: v >= 9.0, PerformanceLevel.EXCELLENT),
    (lambda v: v >= 8.0, PerformanceLevel.VERY_GOOD),
    (lambda v: v > 7.0, PerformanceLevel.GOOD),
    (lambda v: v >= 6.0, PerformanceLevel.AVERAGE),
)


def round_half_up(value: float, places: int = GRADE_DECIMALS) -> float:
    """Round using the decimal text of *value*, so 8.445 becomes 8.45."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True, order=True)
class Average:
    """Immutable, rounded course average.

    Equality and ordering compare the rounded value.
    """

    value: float

    def __post_init__(self) -> None:
        raw = self.value
        if isinstance(raw, bool) or not isinstance(raw, (int, float, Decimal)):
            raise AverageOutOfRangeError(
                f"Average must be a number, got {type(raw).__name__}"
            )
        raw = float(raw)
        if not MIN_GRADE <= raw <= MAX_GRADE:
            raise AverageOutOfRangeError(
                f"Average must be a value between {MIN_GRADE:.1f} and "
                f"{MAX_GRADE:.1f}, got {raw}"
            )
        object.__setattr__(self, "value", round_half_up(raw))

    @classmethod
    def of(cls, value: float) -> Average:
        return cls(value)

    def is_above(self, threshold: float) -> bool:
        return self.value > threshold

    def is_below(self, threshold: float) -> bool:
        return self.value < threshold

    def is_exactly(self, threshold: float) -> bool:
        return self.value == threshold

    def classify(self) -> PerformanceLevel:
        for matches, level in _LEVEL_LADDER:
            if matches(self.value):
                return level
        return PerformanceLevel.BELOW_AVERAGE

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{Decimal(str(self.value)).quantize(_QUANTUM)}"
