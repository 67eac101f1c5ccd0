"""
hyperacc - Composable access-control rules for transaction code.

hyperacc sits in front of sensitive operations in transactional business
logic (chaincode, contract handlers) that already has a verified caller
identity. It provides:
- Identity predicates (organization, organizational unit, role, attribute)
- AND/OR/NOT combinators that nest to any depth
- Custom and always-deny rules as escape hatches
- A structured error model separating policy denials from identity failures

Example usage:
    from hyperacc import AccessController, require_any_organization, require_role

    access = AccessController(
        require_any_organization("Org1MSP", "Org2MSP"),
        require_role("admin") | require_platform_admin(),
    )
    access.check(ctx)   # raises AccessError on denial
"""

__version__ = "0.1.0"
__author__ = "hyperacc Contributors"

from hyperacc.controller import AccessController, check_access, create_middleware, requires
from hyperacc.errors import (
    AccessError,
    HyperaccError,
    IdentityError,
    MissingAttributeError,
    as_access_error,
    is_access_error,
    root_cause,
)
from hyperacc.identity import Certificate, IdentityContext, StaticIdentity, get_caller_info
from hyperacc.notify import Notifier, log_access_denied
from hyperacc.rules import (
    Rule,
    all_of,
    always_deny,
    any_of,
    custom,
    custom_rule,
    negate,
    register_custom_rule,
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
from hyperacc.schema import AccessDecision

__all__ = [
    "__version__",
    "__author__",
    "AccessController",
    "check_access",
    "create_middleware",
    "requires",
    "AccessError",
    "HyperaccError",
    "IdentityError",
    "MissingAttributeError",
    "as_access_error",
    "is_access_error",
    "root_cause",
    "Certificate",
    "IdentityContext",
    "StaticIdentity",
    "get_caller_info",
    "Notifier",
    "log_access_denied",
    "Rule",
    "all_of",
    "any_of",
    "negate",
    "always_deny",
    "custom",
    "custom_rule",
    "register_custom_rule",
    "require_organization",
    "require_any_organization",
    "require_org_unit",
    "require_any_org_unit",
    "require_role",
    "require_any_role",
    "require_attribute",
    "require_has_attribute",
    "require_platform_admin",
    "require_platform_client",
    "AccessDecision",
]
