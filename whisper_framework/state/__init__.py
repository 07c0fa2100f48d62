"""
State module - narrative variables and condition expressions.

Provides:
- VariableStore: flags, ints and strings with change signals
- Condition parsing and evaluation
"""

from whisper_framework.state.store import VariableStore, StoreSnapshot
from whisper_framework.state.conditions import (
    Condition,
    ConditionEvaluator,
    ConditionSyntaxError,
    parse_condition,
)

__all__ = [
    "VariableStore",
    "StoreSnapshot",
    "Condition",
    "ConditionEvaluator",
    "ConditionSyntaxError",
    "parse_condition",
]
