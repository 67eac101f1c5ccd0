"""
Access controller for hyperacc.

The controller is what transaction code calls before a sensitive operation.
It holds an ordered list of top-level rules and checks them as an implicit
AND with early exit: the first failing rule ends the check and its error
is raised unchanged. This differs from AndRule, which evaluates every
child to report all failures.

Usage:
    transfer_access = AccessController(
        require_any_organization("Org1MSP", "Org2MSP"),
        require_role("admin") | require_platform_admin(),
    )

    def transfer(ctx, asset_id, new_owner):
        transfer_access.check(ctx)
        ...
"""

import functools
import logging
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from hyperacc.errors import AccessError
from hyperacc.identity import IdentityContext
from hyperacc.notify import Notifier, log_access_denied
from hyperacc.rules.base import Rule
from hyperacc.schema import AccessDecision

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

Middleware = Callable[[IdentityContext], None]


class AccessController:
    """
    Ordered, immutable list of top-level rules.

    Attributes:
        rules: The rules checked by this controller, in order
    """

    __slots__ = ("_rules",)

    def __init__(self, *rules: Rule) -> None:
        """
        Initialize the controller.

        Args:
            rules: Top-level rules; none at all means no restrictions
        """
        self._rules: tuple[Rule, ...] = tuple(rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def check(self, ctx: IdentityContext) -> None:
        """
        Check every rule in order, stopping at the first failure.

        Raises:
            AccessError: A rule denied access
            Exception: Identity lookup failures, unchanged
        """
        for position, rule in enumerate(self._rules, start=1):
            logger.debug("Checking rule %d/%d: %s", position, len(self._rules), rule.name)
            rule.check(ctx)

    def evaluate(self, ctx: IdentityContext) -> AccessDecision:
        """
        Check the rules and return a decision instead of raising on denial.

        Identity lookup failures still propagate.
        """
        for rule in self._rules:
            try:
                rule.check(ctx)
            except AccessError as e:
                return AccessDecision.deny(e.message, rule=rule.name)

        if not self._rules:
            return AccessDecision.allow("No restrictions")
        return AccessDecision.allow(f"All {len(self._rules)} rule(s) passed")

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __repr__(self) -> str:
        names = ", ".join(rule.name for rule in self._rules)
        return f"AccessController({names})"


def check_access(ctx: IdentityContext, *rules: Rule) -> None:
    """Check `rules` against `ctx` without keeping a controller around."""
    AccessController(*rules).check(ctx)


def create_middleware(*rules: Rule) -> Middleware:
    """Create a `ctx -> None` callable that checks `rules`."""
    controller = AccessController(*rules)

    def middleware(ctx: IdentityContext) -> None:
        controller.check(ctx)

    return middleware


def requires(*rules: Rule, notifier: Notifier | None = None) -> Callable[[F], F]:
    """
    Decorator guarding a function whose first argument is the identity context.

    On failure the denial is reported to `notifier` (if given) and the
    original error is re-raised.

    Usage:
        @requires(require_role("admin"))
        def delete_asset(ctx, asset_id):
            ...
    """
    controller = AccessController(*rules)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(ctx: IdentityContext, *args: Any, **kwargs: Any) -> Any:
            try:
                controller.check(ctx)
            except Exception as e:
                if notifier is not None:
                    log_access_denied(ctx, e, notifier)
                raise
            return func(ctx, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
