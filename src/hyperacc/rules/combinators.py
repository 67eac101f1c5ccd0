"""
Boolean combinators: AND, OR, NOT.

The semantics are deliberately not those of Python's `and`/`or`:

- AndRule evaluates every child, even after a failure, and reports all
  failing children at once. A denial should describe every unmet
  condition, not just the first one.
- OrRule stops at the first passing child. Remaining children are not
  evaluated.
- NotRule passes iff its child raises, whatever it raises.

Aggregated denials list failing children by 1-based position:
    "AND rule failed: rule 2: required role 'admin', got 'viewer'"

An AndRule with no children passes. An OrRule with no children always
denies with "OR rule: no rules defined".
"""

from dataclasses import dataclass

from hyperacc.errors import AccessError, RuleFailure
from hyperacc.identity import IdentityContext
from hyperacc.rules.base import Rule

OR_EMPTY_REASON = "OR rule: no rules defined"
NOT_PASSED_REASON = "NOT rule: rule should not pass"


def _join_failures(failures: list[RuleFailure]) -> str:
    return "; ".join(f.describe() for f in failures)


@dataclass(frozen=True)
class AndRule(Rule):
    """
    All nested rules must pass.

    Child failures of any kind (denials and identity lookup errors) are
    collected and reported in one AccessError. The original exceptions stay
    available in AccessError.failures.
    """

    rules: tuple[Rule, ...] = ()

    @property
    def name(self) -> str:
        return "AND"

    @property
    def children(self) -> tuple[Rule, ...]:
        return self.rules

    def check(self, ctx: IdentityContext) -> None:
        failures: list[RuleFailure] = []
        for position, rule in enumerate(self.rules, start=1):
            try:
                rule.check(ctx)
            except Exception as e:
                failures.append(RuleFailure(position, e))

        if failures:
            raise AccessError(
                reason=f"AND rule failed: {_join_failures(failures)}",
                failures=tuple(failures),
            )


@dataclass(frozen=True)
class OrRule(Rule):
    """At least one nested rule must pass; evaluation stops at the first that does."""

    rules: tuple[Rule, ...] = ()

    @property
    def name(self) -> str:
        return "OR"

    @property
    def children(self) -> tuple[Rule, ...]:
        return self.rules

    def check(self, ctx: IdentityContext) -> None:
        if not self.rules:
            raise AccessError(reason=OR_EMPTY_REASON)

        failures: list[RuleFailure] = []
        for position, rule in enumerate(self.rules, start=1):
            try:
                rule.check(ctx)
            except Exception as e:
                failures.append(RuleFailure(position, e))
            else:
                return

        raise AccessError(
            reason=f"OR rule failed: none of the rules passed: {_join_failures(failures)}",
            failures=tuple(failures),
        )


@dataclass(frozen=True)
class NotRule(Rule):
    """Inverts a rule. The result is always a denial, never the child's own error."""

    rule: Rule

    @property
    def name(self) -> str:
        return "NOT"

    @property
    def children(self) -> tuple[Rule, ...]:
        return (self.rule,)

    def check(self, ctx: IdentityContext) -> None:
        try:
            self.rule.check(ctx)
        except Exception:
            return
        raise AccessError(reason=NOT_PASSED_REASON)


def all_of(*rules: Rule) -> AndRule:
    """Create a rule that requires all nested rules to pass."""
    return AndRule(tuple(rules))


def any_of(*rules: Rule) -> OrRule:
    """Create a rule that requires at least one nested rule to pass."""
    return OrRule(tuple(rules))


def negate(rule: Rule) -> NotRule:
    """Create a rule that passes only when `rule` fails."""
    return NotRule(rule)
