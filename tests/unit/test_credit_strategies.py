"""Test Standard/Premium credit strategies and the registry."""

import pytest

from learner_progress.core.enums import StrategyType
from learner_progress.core.errors import NotFoundError, StrategyNotFoundError
from learner_progress.domain.average import Average
from learner_progress.strategies import default_strategy, get_strategy, list_strategies
from learner_progress.strategies.premium import PremiumCreditStrategy
from learner_progress.strategies.standard import StandardCreditStrategy


class TestStandardStrategy:
    @pytest.fixture
    def strategy(self):
        return get_strategy(StrategyType.STANDARD)

    def test_exactly_threshold_awards_nothing(self, strategy):
        assert strategy.calculate_credits(Average.of(7.0)) == 0

    def test_above_threshold_awards_three(self, strategy):
        assert strategy.calculate_credits(Average.of(7.1)) == 3
        assert strategy.calculate_credits(Average.of(10.0)) == 3

    def test_low_average(self, strategy):
        assert strategy.calculate_credits(Average.of(2.0)) == 0

    def test_name(self, strategy):
        assert strategy.name() == "Standard Credit Strategy"


class TestPremiumStrategy:
    @pytest.fixture
    def strategy(self):
        return get_strategy(StrategyType.PREMIUM)

    @pytest.mark.parametrize(
        "value, expected",
        [(10.0, 5), (9.0, 5), (8.99, 4), (8.5, 4), (8.0, 4), (7.5, 3), (7.01, 3), (7.0, 0), (3.0, 0)],
    )
    def test_tiers(self, strategy, value, expected):
        assert strategy.calculate_credits(Average.of(value)) == expected

    def test_name(self, strategy):
        assert strategy.name() == "Premium Credit Strategy"


class TestRegistry:
    def test_default_is_standard(self):
        assert isinstance(default_strategy(), StandardCreditStrategy)

    def test_instances_are_shared(self):
        assert get_strategy(StrategyType.PREMIUM) is get_strategy(StrategyType.PREMIUM)

    def test_lookup_by_string(self):
        assert isinstance(get_strategy("premium"), PremiumCreditStrategy)
        assert isinstance(get_strategy("STANDARD"), StandardCreditStrategy)

    def test_unknown_tag(self):
        with pytest.raises(StrategyNotFoundError) as exc_info:
            get_strategy("platinum")
        assert exc_info.value.strategy_type == "platinum"
        assert isinstance(exc_info.value, NotFoundError)

    def test_list_strategies(self):
        assert list_strategies() == [StrategyType.PREMIUM, StrategyType.STANDARD]
