"""Test the Credits value object."""

import pytest

from learner_progress.core.errors import (
    InsufficientCreditsError,
    NegativeCreditsError,
    ValidationError,
)
from learner_progress.domain.credits import Credits


class TestCreditsConstruction:
    def test_zero(self):
        assert Credits.zero().amount == 0
        assert Credits.zero().is_empty()

    def test_negative_rejected(self):
        with pytest.raises(NegativeCreditsError, match="cannot be negative"):
            Credits.of(-1)

    def test_non_integer_rejected(self):
        with pytest.raises(NegativeCreditsError):
            Credits.of(1.5)  # type: ignore[arg-type]

    def test_equality_by_amount(self):
        assert Credits.of(4) == Credits.of(4)
        assert Credits.of(4) != Credits.of(5)


class TestCreditsArithmetic:
    def test_add_returns_new_instance(self):
        original = Credits.of(5)
        result = original.add(3)
        assert result.amount == 8
        assert original.amount == 5

    def test_subtract(self):
        assert Credits.of(5).subtract(5).is_empty()

    def test_subtract_more_than_balance(self):
        with pytest.raises(InsufficientCreditsError) as exc_info:
            Credits.of(5).subtract(10)
        err = exc_info.value
        assert err.available == 5
        assert err.required == 10
        assert err.code.value == "INSUFFICIENT_CREDITS"
        assert isinstance(err, ValidationError)

    def test_add_negative_below_zero_fails(self):
        with pytest.raises(NegativeCreditsError):
            Credits.of(2).add(-3)


class TestCreditsQueries:
    def test_has_at_least(self):
        credits = Credits.of(3)
        assert credits.has_at_least(3)
        assert credits.has_at_least(0)
        assert not credits.has_at_least(4)

    def test_is_empty(self):
        assert not Credits.of(1).is_empty()

    def test_str(self):
        assert str(Credits.of(7)) == "7 credits"
