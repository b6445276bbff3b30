"""Strategy registry and factory.

Strategies register themselves here by ``StrategyType``.  Each type maps
to a single process-wide instance.
"""

from __future__ import annotations

from learner_progress.core.enums import StrategyType
from learner_progress.core.errors import StrategyNotFoundError

from .base import CreditStrategy

_REGISTRY: dict[StrategyType, CreditStrategy] = {}

DEFAULT_STRATEGY = StrategyType.STANDARD


def register_strategy(strategy_type: StrategyType):
    """Class decorator: instantiate once and register under *strategy_type*."""

    def decorator(cls: type[CreditStrategy]) -> type[CreditStrategy]:
        _REGISTRY[strategy_type] = cls()
        return cls

    return decorator


def get_strategy(strategy_type: StrategyType | str) -> CreditStrategy:
    """Return the shared instance for *strategy_type*.

    Accepts the enum or its string value (case-insensitive).

    Raises:
        StrategyNotFoundError: for an unknown tag.
    """
    try:
        key = StrategyType(strategy_type.lower() if isinstance(strategy_type, str) else strategy_type)
    except ValueError as exc:
        raise StrategyNotFoundError(strategy_type) from exc

    strategy = _REGISTRY.get(key)
    if strategy is None:
        raise StrategyNotFoundError(strategy_type)
    return strategy


def default_strategy() -> CreditStrategy:
    return get_strategy(DEFAULT_STRATEGY)


def list_strategies() -> list[StrategyType]:
    """List all registered strategy types."""
    return sorted(_REGISTRY, key=lambda t: t.value)
