"""Credit calculation strategies.

Importing this package registers the built-in strategies.
"""

from learner_progress.strategies.base import CreditStrategy, ThresholdLadderStrategy
from learner_progress.strategies.registry import (
    default_strategy,
    get_strategy,
    list_strategies,
    register_strategy,
)
from learner_progress.strategies import premium, standard  # noqa: F401  (registration)

__all__ = [
    "CreditStrategy",
    "ThresholdLadderStrategy",
    "default_strategy",
    "get_strategy",
    "list_strategies",
    "register_strategy",
]
