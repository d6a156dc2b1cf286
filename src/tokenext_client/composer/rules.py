"""
Extension compatibility rules.

The rule table is a fixed deny-list of unordered extension pairs. Any pair
absent from the table is compatible. Checking is purely local so an invalid
combination fails before any ledger traffic.
"""

from __future__ import annotations
from dataclasses import dataclass
from itertools import combinations
from typing import FrozenSet, Iterable, List, Optional

from ..enums import ExtensionKind
from ..runtime.errors import CompatibilityError


@dataclass(frozen=True)
class CompatibilityRule:
    """An unordered pair of extensions that cannot share a mint."""
    pair: FrozenSet[ExtensionKind]
    reason: str

    def __post_init__(self):
        if len(self.pair) != 2:
            raise ValueError("A compatibility rule names exactly two distinct extensions")

    def involves(self, kind: ExtensionKind) -> bool:
        return kind in self.pair

    def kinds(self) -> List[ExtensionKind]:
        """Both kinds in a stable order."""
        return sorted(self.pair)

    def describe(self) -> str:
        first, second = self.kinds()
        return f"{first.label} and {second.label} cannot be combined: {self.reason}"


def _rule(a: ExtensionKind, b: ExtensionKind, reason: str) -> CompatibilityRule:
    return CompatibilityRule(frozenset((a, b)), reason)


RULE_TABLE = (
    _rule(ExtensionKind.NON_TRANSFERABLE, ExtensionKind.TRANSFER_FEE,
          "a token that cannot move cannot charge a transfer fee"),
    _rule(ExtensionKind.NON_TRANSFERABLE, ExtensionKind.TRANSFER_HOOK,
          "a token that cannot move never invokes a transfer hook"),
    _rule(ExtensionKind.NON_TRANSFERABLE, ExtensionKind.CONFIDENTIAL_BALANCES,
          "a token that cannot move has no transfer amounts to hide"),
    _rule(ExtensionKind.CONFIDENTIAL_BALANCES, ExtensionKind.TRANSFER_FEE,
          "hidden amounts cannot be fee-computed"),
    _rule(ExtensionKind.CONFIDENTIAL_BALANCES, ExtensionKind.TRANSFER_HOOK,
          "hidden amounts cannot be inspected by a hook"),
    _rule(ExtensionKind.CONFIDENTIAL_BALANCES, ExtensionKind.PERMANENT_DELEGATE,
          "a delegate cannot move balances whose amounts it cannot see"),
)

_RULES_BY_PAIR = {rule.pair: rule for rule in RULE_TABLE}


def find_rule(a: ExtensionKind, b: ExtensionKind) -> Optional[CompatibilityRule]:
    """Rule forbidding the pair, if any; argument order does not matter."""
    return _RULES_BY_PAIR.get(frozenset((a, b)))


@dataclass(frozen=True)
class CompatibilityReport:
    """Outcome of a compatibility check; ``violations`` lists every conflict."""
    requested: FrozenSet[ExtensionKind]
    violations: tuple = ()

    @property
    def ok(self) -> bool:
        return not self.violations

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_violations(self) -> None:
        if self.violations:
            raise CompatibilityError(list(self.violations))


def check(requested: Iterable[ExtensionKind]) -> CompatibilityReport:
    """
    Evaluate a feature set against the rule table.

    Every unordered pair of the requested kinds is looked up, and all matches
    are collected so one report shows every conflict.
    """
    kinds = frozenset(requested)
    violations = []
    for a, b in combinations(sorted(kinds), 2):
        rule = find_rule(a, b)
        if rule is not None:
            violations.append(rule)
    return CompatibilityReport(kinds, tuple(violations))


def ensure_compatible(requested: Iterable[ExtensionKind]) -> None:
    """
    Raises:
        CompatibilityError: Listing every forbidden pair in ``requested``
    """
    check(requested).raise_for_violations()


__all__ = [
    "CompatibilityRule",
    "CompatibilityReport",
    "RULE_TABLE",
    "find_rule",
    "check",
    "ensure_compatible",
]
