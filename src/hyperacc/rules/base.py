"""
Base class for access rules.

A Rule is the single abstraction of hyperacc: "evaluate against an identity
context, succeed or fail with a reason". Predicates, custom checks and the
AND/OR/NOT combinators all implement it, so any rule can be nested inside
any combinator.

Contract:
    - check(ctx) returns None when the rule passes
    - check(ctx) raises AccessError when policy denies access
    - check(ctx) lets identity lookup failures propagate unchanged

Rules are frozen dataclasses. They hold configuration only, never
per-evaluation state, so one rule tree can serve any number of
concurrent evaluations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING

from hyperacc.errors import AccessError
from hyperacc.identity import IdentityContext
from hyperacc.schema import AccessDecision

if TYPE_CHECKING:
    from hyperacc.rules.combinators import AndRule, NotRule, OrRule


class Rule(ABC):
    """
    Abstract base class for all rules.

    Subclasses must implement:
    - check(): Raise AccessError to deny, return None to allow

    Rules compose with operators:
        require_role("admin") & require_organization("Org1MSP")   # AND
        require_role("admin") | require_role("auditor")           # OR
        ~require_platform_client()                                # NOT
    """

    @abstractmethod
    def check(self, ctx: IdentityContext) -> None:
        """
        Evaluate the rule against the caller identity.

        Raises:
            AccessError: The caller does not satisfy the rule
            IdentityError: Identity data could not be read
        """
        ...

    @property
    def name(self) -> str:
        """Short display name used in rule trees and decisions."""
        return self.__class__.__name__

    @property
    def children(self) -> tuple["Rule", ...]:
        """Nested rules (empty for leaf rules)."""
        return ()

    def evaluate(self, ctx: IdentityContext) -> AccessDecision:
        """
        Evaluate the rule and return a decision instead of raising on denial.

        Identity lookup failures still propagate; only a policy denial
        becomes a DENY decision.
        """
        try:
            self.check(ctx)
        except AccessError as e:
            return AccessDecision.deny(e.message, rule=self.name)
        return AccessDecision.allow(f"{self.name} passed", rule=self.name)

    def walk(self) -> Iterator["Rule"]:
        """Iterate this rule and all nested rules, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def __and__(self, other: "Rule") -> "AndRule":
        if not isinstance(other, Rule):
            return NotImplemented
        from hyperacc.rules.combinators import AndRule

        return AndRule(_operands(self, AndRule) + _operands(other, AndRule))

    def __or__(self, other: "Rule") -> "OrRule":
        if not isinstance(other, Rule):
            return NotImplemented
        from hyperacc.rules.combinators import OrRule

        return OrRule(_operands(self, OrRule) + _operands(other, OrRule))

    def __invert__(self) -> "NotRule":
        from hyperacc.rules.combinators import NotRule

        return NotRule(self)

    def __str__(self) -> str:
        return self.name


def _operands(rule: Rule, combinator: type) -> tuple[Rule, ...]:
    # same-type operands are spliced: `a & b & c` is all_of(a, b, c)
    if type(rule) is combinator:
        return rule.children
    return (rule,)
