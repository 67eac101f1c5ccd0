"""
Build rule trees and identities from declarative documents.

Rule specs (hyperacc.schema) are plain data; this module maps each spec
kind onto the matching rule factory. Custom rules are looked up by name in
a CustomRuleRegistry, the default registry unless one is passed.
"""

from hyperacc.controller import AccessController
from hyperacc.identity import StaticIdentity
from hyperacc.rules import (
    CustomRuleRegistry,
    Rule,
    all_of,
    always_deny,
    any_of,
    default_registry,
    negate,
    require_any_org_unit,
    require_any_organization,
    require_any_role,
    require_attribute,
    require_has_attribute,
    require_org_unit,
    require_organization,
    require_platform_admin,
    require_platform_client,
    require_role,
)
from hyperacc.schema import (
    AlwaysDenySpec,
    AndSpec,
    AnyOrganizationSpec,
    AnyOrgUnitSpec,
    AnyRoleSpec,
    AttributeSpec,
    CustomSpec,
    HasAttributeSpec,
    IdentityDocument,
    NotSpec,
    OrganizationSpec,
    OrgUnitSpec,
    OrSpec,
    PlatformAdminSpec,
    PlatformClientSpec,
    PolicyDocument,
    RoleSpec,
    RuleSpec,
)


def build_rule(spec: RuleSpec, registry: CustomRuleRegistry | None = None) -> Rule:
    """
    Turn a rule spec (and its nested specs) into a Rule.

    Raises:
        CustomRuleNotFoundError: A custom spec names an unregistered rule
    """
    registry = registry if registry is not None else default_registry

    if isinstance(spec, OrganizationSpec):
        return require_organization(spec.organization)
    if isinstance(spec, AnyOrganizationSpec):
        return require_any_organization(*spec.organizations)
    if isinstance(spec, OrgUnitSpec):
        return require_org_unit(spec.org_unit)
    if isinstance(spec, AnyOrgUnitSpec):
        return require_any_org_unit(*spec.org_units)
    if isinstance(spec, RoleSpec):
        return require_role(spec.role)
    if isinstance(spec, AnyRoleSpec):
        return require_any_role(*spec.roles)
    if isinstance(spec, AttributeSpec):
        return require_attribute(spec.attribute, spec.value)
    if isinstance(spec, HasAttributeSpec):
        return require_has_attribute(spec.attribute)
    if isinstance(spec, PlatformAdminSpec):
        return require_platform_admin()
    if isinstance(spec, PlatformClientSpec):
        return require_platform_client()
    if isinstance(spec, AlwaysDenySpec):
        return always_deny(spec.message)
    if isinstance(spec, CustomSpec):
        return registry.get(spec.name)
    if isinstance(spec, AndSpec):
        return all_of(*(build_rule(child, registry) for child in spec.rules))
    if isinstance(spec, OrSpec):
        return any_of(*(build_rule(child, registry) for child in spec.rules))
    if isinstance(spec, NotSpec):
        return negate(build_rule(spec.rule, registry))

    msg = f"Unsupported rule spec: {type(spec).__name__}"
    raise TypeError(msg)


def build_controller(
    document: PolicyDocument,
    registry: CustomRuleRegistry | None = None,
) -> AccessController:
    """Build a controller holding the document's top-level rules."""
    return AccessController(*(build_rule(spec, registry) for spec in document.rules))


def build_identity(document: IdentityDocument) -> StaticIdentity:
    """Build an in-memory identity context from an identity document."""
    return StaticIdentity(
        organization_id=document.organization_id,
        id=document.id,
        organizational_units=document.organizational_units,
        attributes=document.attributes,
        failing=document.failing,
    )
