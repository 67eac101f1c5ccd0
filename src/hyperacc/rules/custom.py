"""
Custom and always-deny rules, plus the registry of named custom checks.

CustomRule is the extension point for policy the built-in predicates do
not anticipate: any function following the rule contract becomes a Rule
and can sit anywhere in a combinator tree.

The registry maps names to custom rules so declarative policy files can
refer to them (`kind: custom, name: business-hours`).

Usage:
    @custom_rule("not-self")
    def not_self(ctx):
        if ctx.get_id() == OWNER_ID:
            raise AccessError(reason="owner cannot approve own transfer")

    register_custom_rule(not_self)
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from hyperacc.errors import AccessError, CustomRuleNotFoundError
from hyperacc.identity import IdentityContext
from hyperacc.rules.base import Rule

CheckFunc = Callable[[IdentityContext], Any]


@dataclass(frozen=True)
class CustomRule(Rule):
    """
    Rule backed by a caller-supplied function.

    The function receives the identity context and either returns (pass)
    or raises (fail). Returning exactly False is read as a denial.
    """

    rule_name: str
    check_func: CheckFunc

    @property
    def name(self) -> str:
        return self.rule_name

    def check(self, ctx: IdentityContext) -> None:
        if self.check_func(ctx) is False:
            raise AccessError(reason=f"custom rule '{self.rule_name}' denied access")


@dataclass(frozen=True)
class AlwaysDenyRule(Rule):
    """Rule that never passes. An empty message falls back to "access denied"."""

    message: str = ""

    @property
    def name(self) -> str:
        return "always_deny"

    def check(self, ctx: IdentityContext) -> None:
        raise AccessError(reason=self.message)


def custom(name: str, check_func: CheckFunc) -> CustomRule:
    """Create a rule from a check function."""
    return CustomRule(name, check_func)


def custom_rule(name: str) -> Callable[[CheckFunc], CustomRule]:
    """Decorator turning a check function into a CustomRule."""

    def decorator(func: CheckFunc) -> CustomRule:
        return CustomRule(name, func)

    return decorator


def always_deny(message: str = "") -> AlwaysDenyRule:
    """Create a rule that always denies access."""
    return AlwaysDenyRule(message)


# =============================================================================
# Registry
# =============================================================================


class CustomRuleRegistry:
    """
    Registry for looking up custom rules by name.

    Attributes:
        _rules: Internal mapping of rule names to rules
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._rules: dict[str, CustomRule] = {}

    def register(self, rule: CustomRule) -> None:
        """
        Register a custom rule. Re-registering a name replaces the old rule.

        Raises:
            ValueError: If rule is None or has an empty name
        """
        if rule is None:
            msg = "Cannot register None as a custom rule"
            raise ValueError(msg)

        if not rule.rule_name:
            msg = "Custom rule must have a non-empty name"
            raise ValueError(msg)

        self._rules[rule.rule_name] = rule

    def get(self, name: str) -> CustomRule:
        """
        Look up a custom rule by name.

        Raises:
            CustomRuleNotFoundError: If no rule with that name is registered
        """
        rule = self._rules.get(name)
        if rule is None:
            raise CustomRuleNotFoundError(rule_name=name)
        return rule

    def has(self, name: str) -> bool:
        """Check if a custom rule is registered."""
        return name in self._rules

    def unregister(self, name: str) -> bool:
        """Remove a custom rule. Returns True if it was registered."""
        return self._rules.pop(name, None) is not None

    def list_names(self) -> list[str]:
        """Names of all registered rules, sorted."""
        return sorted(self._rules)

    def clear(self) -> None:
        """Remove all registered rules (for testing)."""
        self._rules.clear()

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[CustomRule]:
        return iter(self._rules.values())


default_registry = CustomRuleRegistry()


def register_custom_rule(rule: CustomRule) -> CustomRule:
    """Register a rule in the default registry and return it."""
    default_registry.register(rule)
    return rule


def get_custom_rule(name: str) -> CustomRule:
    """Look up a rule in the default registry."""
    return default_registry.get(name)
