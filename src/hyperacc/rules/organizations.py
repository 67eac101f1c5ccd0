"""
Organization and organizational-unit rules.

Organization id (MSP id) and organizational units (certificate subject OU)
are the tenant and department of the caller. Denials name the requirement
and the observed value only.
"""

from dataclasses import dataclass

from hyperacc.errors import AccessError
from hyperacc.identity import IdentityContext
from hyperacc.rules.base import Rule


@dataclass(frozen=True)
class OrganizationRule(Rule):
    """Caller must belong to exactly this organization."""

    organization: str

    @property
    def name(self) -> str:
        return f"organization({self.organization})"

    def check(self, ctx: IdentityContext) -> None:
        org = ctx.get_organization_id()
        if org != self.organization:
            raise AccessError(
                reason=f"required organization '{self.organization}', got '{org}'"
            )


@dataclass(frozen=True)
class AnyOrganizationRule(Rule):
    """Caller must belong to one of the listed organizations."""

    organizations: tuple[str, ...]

    @property
    def name(self) -> str:
        return f"any_organization({', '.join(self.organizations)})"

    def check(self, ctx: IdentityContext) -> None:
        org = ctx.get_organization_id()
        if org in self.organizations:
            return
        raise AccessError(
            reason=f"required one of organizations {list(self.organizations)}, got '{org}'"
        )


@dataclass(frozen=True)
class OrgUnitRule(Rule):
    """Caller certificate must list this organizational unit."""

    org_unit: str

    @property
    def name(self) -> str:
        return f"org_unit({self.org_unit})"

    def check(self, ctx: IdentityContext) -> None:
        org = ctx.get_organization_id()
        cert = ctx.get_certificate()
        if self.org_unit not in cert.organizational_units:
            raise AccessError(
                reason=f"required organizational unit '{self.org_unit}', organization: {org}"
            )


@dataclass(frozen=True)
class AnyOrgUnitRule(Rule):
    """Caller certificate must list at least one of these organizational units."""

    org_units: tuple[str, ...]

    @property
    def name(self) -> str:
        return f"any_org_unit({', '.join(self.org_units)})"

    def check(self, ctx: IdentityContext) -> None:
        org = ctx.get_organization_id()
        cert = ctx.get_certificate()
        if any(ou in self.org_units for ou in cert.organizational_units):
            return
        raise AccessError(
            reason=(
                f"required one of organizational units {list(self.org_units)}, "
                f"organization: {org}"
            )
        )


def require_organization(organization: str) -> OrganizationRule:
    """Create a rule requiring a specific organization id."""
    return OrganizationRule(organization)


def require_any_organization(*organizations: str) -> AnyOrganizationRule:
    """Create a rule requiring one of the given organization ids."""
    return AnyOrganizationRule(tuple(organizations))


def require_org_unit(org_unit: str) -> OrgUnitRule:
    """Create a rule requiring a specific organizational unit."""
    return OrgUnitRule(org_unit)


def require_any_org_unit(*org_units: str) -> AnyOrgUnitRule:
    """Create a rule requiring one of the given organizational units."""
    return AnyOrgUnitRule(tuple(org_units))
