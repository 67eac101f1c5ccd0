"""
Attribute-based rules: role, arbitrary attributes, platform identity type.

Absence and mismatch are kept apart. For role rules a missing "role"
attribute is an identity problem (MissingAttributeError), while a role
with the wrong value is a policy denial. Generic attribute rules treat a
missing attribute as a denial, since the attribute is the requirement.
"""

from dataclasses import dataclass

from hyperacc.errors import AccessError, MissingAttributeError
from hyperacc.identity import PLATFORM_TYPE_ATTRIBUTE, ROLE_ATTRIBUTE, IdentityContext
from hyperacc.rules.base import Rule


def _get_role(ctx: IdentityContext) -> str:
    role, found = ctx.get_attribute(ROLE_ATTRIBUTE)
    if not found:
        raise MissingAttributeError(attribute=ROLE_ATTRIBUTE)
    return role


@dataclass(frozen=True)
class RoleRule(Rule):
    """Caller must carry exactly this role."""

    role: str

    @property
    def name(self) -> str:
        return f"role({self.role})"

    def check(self, ctx: IdentityContext) -> None:
        role = _get_role(ctx)
        if role != self.role:
            raise AccessError(reason=f"required role '{self.role}', got '{role}'")


@dataclass(frozen=True)
class AnyRoleRule(Rule):
    """Caller must carry one of the listed roles."""

    roles: tuple[str, ...]

    @property
    def name(self) -> str:
        return f"any_role({', '.join(self.roles)})"

    def check(self, ctx: IdentityContext) -> None:
        role = _get_role(ctx)
        if role in self.roles:
            return
        raise AccessError(reason=f"required one of roles {list(self.roles)}, got '{role}'")


@dataclass(frozen=True)
class AttributeRule(Rule):
    """
    Caller must carry attribute `attribute`.

    When `value` is non-empty the attribute must also equal it; an empty
    value checks presence only.
    """

    attribute: str
    value: str = ""

    @property
    def name(self) -> str:
        if self.value:
            return f"attribute({self.attribute}={self.value})"
        return f"attribute({self.attribute})"

    def check(self, ctx: IdentityContext) -> None:
        actual, found = ctx.get_attribute(self.attribute)
        if not found:
            raise AccessError(reason=f"attribute '{self.attribute}' not found")

        if self.value and actual != self.value:
            raise AccessError(
                reason=(
                    f"attribute '{self.attribute}' has value '{actual}', "
                    f"expected '{self.value}'"
                )
            )


@dataclass(frozen=True)
class HasAttributeRule(Rule):
    """Caller must carry attribute `attribute`; its value is irrelevant."""

    attribute: str

    @property
    def name(self) -> str:
        return f"has_attribute({self.attribute})"

    def check(self, ctx: IdentityContext) -> None:
        _, found = ctx.get_attribute(self.attribute)
        if not found:
            raise AccessError(reason=f"attribute '{self.attribute}' not found")


@dataclass(frozen=True)
class PlatformTypeRule(Rule):
    """
    Caller's platform identity type (hf.Type) must equal `identity_type`.

    The assertion is delegated to the identity context. Whatever it raises,
    absent attribute, other type or lookup failure, is wrapped as the cause
    of the denial.
    """

    identity_type: str

    @property
    def name(self) -> str:
        return f"platform_{self.identity_type}"

    def check(self, ctx: IdentityContext) -> None:
        try:
            ctx.assert_attribute(PLATFORM_TYPE_ATTRIBUTE, self.identity_type)
        except Exception as e:
            raise AccessError(
                reason=f"{self.identity_type} type required in {PLATFORM_TYPE_ATTRIBUTE} attribute",
                cause=e,
            ) from e


def require_role(role: str) -> RoleRule:
    """Create a rule requiring a specific role."""
    return RoleRule(role)


def require_any_role(*roles: str) -> AnyRoleRule:
    """Create a rule requiring one of the given roles."""
    return AnyRoleRule(tuple(roles))


def require_attribute(attribute: str, value: str = "") -> AttributeRule:
    """Create a rule checking an attribute's presence and, if given, its value."""
    return AttributeRule(attribute, value)


def require_has_attribute(attribute: str) -> HasAttributeRule:
    """Create a rule checking only that an attribute is present."""
    return HasAttributeRule(attribute)


def require_platform_admin() -> PlatformTypeRule:
    """Create a rule requiring a platform administrator identity."""
    return PlatformTypeRule("admin")


def require_platform_client() -> PlatformTypeRule:
    """Create a rule requiring a platform client identity."""
    return PlatformTypeRule("client")
