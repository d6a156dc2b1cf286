"""
Extension composition engine.

Key components:
- rules.py: forbidden extension pairs and the compatibility checker
- layout.py: account byte layout and funding
- ordering.py: the canonical initialization order
- emit.py: concrete instructions for each initialization step
- builder.py: fluent builder with plan() and execute()
- fees.py: transfer fee arithmetic
"""

from .rules import CompatibilityReport, CompatibilityRule, RULE_TABLE, check, ensure_compatible, find_rule
from .layout import AccountLayout, compute_layout, measure
from .ordering import DECLARATION_ORDER, InitStep, InitializationPlan, resolve
from .fees import calculate_fee, calculate_inverse_fee
from .builder import CompositionBuilder, CompositionPlan, CompositionState, ExecutionResult

__all__ = [
    "CompatibilityReport",
    "CompatibilityRule",
    "RULE_TABLE",
    "check",
    "ensure_compatible",
    "find_rule",
    "AccountLayout",
    "compute_layout",
    "measure",
    "DECLARATION_ORDER",
    "InitStep",
    "InitializationPlan",
    "resolve",
    "calculate_fee",
    "calculate_inverse_fee",
    "CompositionBuilder",
    "CompositionPlan",
    "CompositionState",
    "ExecutionResult",
]
