"""Credits value object: a non-negative integer balance."""

from __future__ import annotations

from dataclasses import dataclass

from learner_progress.core.errors import InsufficientCreditsError, NegativeCreditsError


@dataclass(frozen=True, order=True)
class Credits:
    """Immutable credit balance.  Arithmetic returns new instances."""

    amount: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise NegativeCreditsError(
                f"Credits must be an integer, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise NegativeCreditsError(f"Credits cannot be negative: {self.amount}")

    @classmethod
    def of(cls, amount: int) -> Credits:
        return cls(amount)

    @classmethod
    def zero(cls) -> Credits:
        return cls(0)

    def add(self, value: int) -> Credits:
        return Credits.of(self.amount + value)

    def subtract(self, value: int) -> Credits:
        if self.amount < value:
            raise InsufficientCreditsError(available=self.amount, required=value)
        return Credits.of(self.amount - value)

    def has_at_least(self, required: int) -> bool:
        return self.amount >= required

    def is_empty(self) -> bool:
        return self.amount == 0

    def __int__(self) -> int:
        return self.amount

    def __str__(self) -> str:
        return f"{self.amount} credits"
