"""
Unit tests for identity predicate rules.

Tests cover:
- Organization and organizational-unit rules
- Role rules (absence vs. mismatch)
- Attribute presence/value rules
- Platform admin/client rules
- Propagation of identity lookup failures
"""

import pytest

from hyperacc.errors import (
    AccessError,
    AttributeAssertionError,
    IdentityError,
    MissingAttributeError,
)
from hyperacc.identity import StaticIdentity
from hyperacc.rules import (
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


# =============================================================================
# Organization Rules
# =============================================================================


class TestOrganizationRules:
    """Tests for organization id rules."""

    def test_exact_match_passes(self, admin_identity: StaticIdentity) -> None:
        require_organization("Org1MSP").check(admin_identity)

    def test_mismatch_denied(self, admin_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_organization("Org2MSP").check(admin_identity)
        assert exc_info.value.reason == "required organization 'Org2MSP', got 'Org1MSP'"

    def test_exact_match_is_not_prefix_match(self) -> None:
        ctx = StaticIdentity(organization_id="Org1MSPX")
        with pytest.raises(AccessError):
            require_organization("Org1MSP").check(ctx)

    def test_any_organization_member(self, admin_identity: StaticIdentity) -> None:
        require_any_organization("Org2MSP", "Org1MSP").check(admin_identity)

    def test_any_organization_not_member(self, admin_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_any_organization("Org2MSP", "Org3MSP").check(admin_identity)
        reason = exc_info.value.reason
        assert "['Org2MSP', 'Org3MSP']" in reason
        assert "got 'Org1MSP'" in reason

    def test_any_organization_empty_set_denies(self, admin_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError):
            require_any_organization().check(admin_identity)

    def test_lookup_failure_propagates(self) -> None:
        """Identity failures are not converted into denials."""
        ctx = StaticIdentity(organization_id="Org1MSP", failing=["get_organization_id"])
        with pytest.raises(IdentityError) as exc_info:
            require_organization("Org1MSP").check(ctx)
        assert not isinstance(exc_info.value, AccessError)


class TestOrgUnitRules:
    """Tests for organizational unit rules."""

    def test_unit_present(self, admin_identity: StaticIdentity) -> None:
        require_org_unit("sales").check(admin_identity)

    def test_unit_absent(self) -> None:
        ctx = StaticIdentity(organization_id="Org1MSP", organizational_units=["sales"])
        with pytest.raises(AccessError) as exc_info:
            require_org_unit("manufacturing").check(ctx)
        reason = exc_info.value.reason
        assert "manufacturing" in reason
        assert "Org1MSP" in reason

    def test_any_unit(self, admin_identity: StaticIdentity) -> None:
        require_any_org_unit("hr", "client").check(admin_identity)

    def test_any_unit_none_match(self, admin_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_any_org_unit("hr", "legal").check(admin_identity)
        assert "['hr', 'legal']" in exc_info.value.reason

    def test_certificate_failure_propagates(self) -> None:
        ctx = StaticIdentity(organization_id="Org1MSP", failing=["get_certificate"])
        with pytest.raises(IdentityError):
            require_org_unit("sales").check(ctx)


# =============================================================================
# Role Rules
# =============================================================================


class TestRoleRules:
    """Tests for role rules."""

    def test_role_matches(self, admin_identity: StaticIdentity) -> None:
        require_role("admin").check(admin_identity)

    def test_role_mismatch_is_denial(self, admin_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_role("auditor").check(admin_identity)
        assert exc_info.value.reason == "required role 'auditor', got 'admin'"

    def test_role_absent_is_infrastructure_error(self, no_role_identity: StaticIdentity) -> None:
        """Missing role attribute is distinct from a wrong role."""
        with pytest.raises(MissingAttributeError) as exc_info:
            require_role("admin").check(no_role_identity)
        assert not isinstance(exc_info.value, AccessError)
        assert exc_info.value.attribute == "role"

    def test_any_role(self, admin_identity: StaticIdentity) -> None:
        require_any_role("auditor", "admin").check(admin_identity)

    def test_any_role_mismatch(self, admin_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_any_role("auditor", "operator").check(admin_identity)
        assert "got 'admin'" in exc_info.value.reason

    def test_any_role_absent(self, no_role_identity: StaticIdentity) -> None:
        with pytest.raises(MissingAttributeError):
            require_any_role("admin").check(no_role_identity)


# =============================================================================
# Attribute Rules
# =============================================================================


class TestAttributeRules:
    """Tests for generic attribute rules."""

    def test_presence_only(self, admin_identity: StaticIdentity) -> None:
        """Empty expected value checks presence regardless of value."""
        require_attribute("dept", "").check(admin_identity)
        require_attribute("dept").check(admin_identity)

    def test_absent(self, no_role_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_attribute("dept", "").check(no_role_identity)
        assert exc_info.value.reason == "attribute 'dept' not found"

    def test_value_matches(self, admin_identity: StaticIdentity) -> None:
        require_attribute("dept", "eng").check(admin_identity)

    def test_value_mismatch(self, admin_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_attribute("dept", "finance").check(admin_identity)
        assert exc_info.value.reason == "attribute 'dept' has value 'eng', expected 'finance'"

    def test_has_attribute(self, admin_identity: StaticIdentity) -> None:
        require_has_attribute("dept").check(admin_identity)

    def test_has_attribute_absent(self, no_role_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_has_attribute("dept").check(no_role_identity)
        assert exc_info.value.reason == "attribute 'dept' not found"

    def test_attribute_lookup_failure_propagates(self) -> None:
        ctx = StaticIdentity(organization_id="Org1MSP", failing=["get_attribute"])
        with pytest.raises(IdentityError):
            require_attribute("dept").check(ctx)
        with pytest.raises(IdentityError):
            require_has_attribute("dept").check(ctx)


# =============================================================================
# Platform Type Rules
# =============================================================================


class TestPlatformTypeRules:
    """Tests for platform admin/client rules."""

    def test_client(self, admin_identity: StaticIdentity) -> None:
        require_platform_client().check(admin_identity)

    def test_admin_denied_wraps_assertion(self, admin_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_platform_admin().check(admin_identity)
        err = exc_info.value
        assert err.reason == "admin type required in hf.Type attribute"
        assert isinstance(err.cause, AttributeAssertionError)
        assert isinstance(err.root_cause(), AttributeAssertionError)

    def test_admin(self) -> None:
        ctx = StaticIdentity(organization_id="Org1MSP", attributes={"hf.Type": "admin"})
        require_platform_admin().check(ctx)

    def test_absent_type_denied(self, no_role_identity: StaticIdentity) -> None:
        with pytest.raises(AccessError) as exc_info:
            require_platform_client().check(no_role_identity)
        assert exc_info.value.reason == "client type required in hf.Type attribute"
        assert "was not found" in exc_info.value.message


class TestRuleNames:
    """Display names used in trees and decisions."""

    def test_names(self) -> None:
        assert require_organization("Org1MSP").name == "organization(Org1MSP)"
        assert require_any_role("a", "b").name == "any_role(a, b)"
        assert require_attribute("dept", "eng").name == "attribute(dept=eng)"
        assert require_attribute("dept").name == "attribute(dept)"
        assert require_platform_admin().name == "platform_admin"

    def test_rules_are_immutable(self) -> None:
        rule = require_role("admin")
        with pytest.raises(AttributeError):
            rule.role = "viewer"  # type: ignore[misc]
