"""Canonical schema (Pydantic) - Condition, Bet, outcome dependencies."""

from predpool.models.bet import Bet, PayoutView
from predpool.models.condition import Condition, ConditionState
from predpool.models.dependency import OutcomeDependency

__all__ = [
    "Condition",
    "ConditionState",
    "Bet",
    "PayoutView",
    "OutcomeDependency",
]
