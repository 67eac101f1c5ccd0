"""
Rules module for hyperacc.

Built-in rules:
    - Organization: require_organization, require_any_organization
    - Organizational unit: require_org_unit, require_any_org_unit
    - Role: require_role, require_any_role
    - Attribute: require_attribute, require_has_attribute
    - Platform type: require_platform_admin, require_platform_client
    - Escape hatches: custom, custom_rule, always_deny
    - Combinators: all_of (AND), any_of (OR), negate (NOT)

Every rule is a Rule and composes with every other rule.
"""

from hyperacc.rules.attributes import (
    AnyRoleRule,
    AttributeRule,
    HasAttributeRule,
    PlatformTypeRule,
    RoleRule,
    require_any_role,
    require_attribute,
    require_has_attribute,
    require_platform_admin,
    require_platform_client,
    require_role,
)
from hyperacc.rules.base import Rule
from hyperacc.rules.combinators import AndRule, NotRule, OrRule, all_of, any_of, negate
from hyperacc.rules.custom import (
    AlwaysDenyRule,
    CustomRule,
    CustomRuleRegistry,
    always_deny,
    custom,
    custom_rule,
    default_registry,
    get_custom_rule,
    register_custom_rule,
)
from hyperacc.rules.organizations import (
    AnyOrganizationRule,
    AnyOrgUnitRule,
    OrganizationRule,
    OrgUnitRule,
    require_any_org_unit,
    require_any_organization,
    require_org_unit,
    require_organization,
)

__all__ = [
    "Rule",
    "AndRule",
    "OrRule",
    "NotRule",
    "all_of",
    "any_of",
    "negate",
    "OrganizationRule",
    "AnyOrganizationRule",
    "OrgUnitRule",
    "AnyOrgUnitRule",
    "require_organization",
    "require_any_organization",
    "require_org_unit",
    "require_any_org_unit",
    "RoleRule",
    "AnyRoleRule",
    "AttributeRule",
    "HasAttributeRule",
    "PlatformTypeRule",
    "require_role",
    "require_any_role",
    "require_attribute",
    "require_has_attribute",
    "require_platform_admin",
    "require_platform_client",
    "CustomRule",
    "AlwaysDenyRule",
    "CustomRuleRegistry",
    "custom",
    "custom_rule",
    "always_deny",
    "default_registry",
    "get_custom_rule",
    "register_custom_rule",
]
