"""
Schema definitions for hyperacc.

This module defines the Pydantic models used around the rule engine:
- AccessDecision: The result of evaluating a rule or controller
- Rule specs / PolicyDocument: Declarative rule trees loaded from YAML
- IdentityDocument: A caller identity described in YAML (offline checks)

Design Decisions:
    - Models are immutable (frozen=True) and reject unknown keys
    - Rule specs are a discriminated union on `kind`, so a typo in a kind
      is reported as a validation error instead of being ignored
    - Specs only describe rules; hyperacc.policy turns them into Rule objects
"""

from pathlib import Path
from typing import Annotated, Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hyperacc.errors import PolicyValidationError


# =============================================================================
# Decisions
# =============================================================================


class AccessDecision(BaseModel):
    """
    Result of evaluating a rule against a caller identity.

    Attributes:
        allowed: Whether access is granted
        reason: Human-readable explanation of the decision
        rule_matched: Display name of the rule that decided
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed: bool = Field(
        ...,
        description="Whether access is granted",
    )
    reason: str = Field(
        ...,
        description="Human-readable explanation of the decision",
    )
    rule_matched: str | None = Field(
        default=None,
        description="Which rule produced this decision",
    )

    @classmethod
    def allow(cls, reason: str, rule: str | None = None) -> "AccessDecision":
        """Create an ALLOW decision."""
        return cls(allowed=True, reason=reason, rule_matched=rule)

    @classmethod
    def deny(cls, reason: str, rule: str | None = None) -> "AccessDecision":
        """Create a DENY decision."""
        return cls(allowed=False, reason=reason, rule_matched=rule)


# =============================================================================
# Rule Specs
# =============================================================================


class _Spec(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class OrganizationSpec(_Spec):
    """Caller organization id must equal `organization`."""

    kind: Literal["organization"]
    organization: str = Field(..., min_length=1)


class AnyOrganizationSpec(_Spec):
    """Caller organization id must be one of `organizations`."""

    kind: Literal["any_organization"]
    organizations: list[str] = Field(..., min_length=1)


class OrgUnitSpec(_Spec):
    """Caller certificate must list `org_unit`."""

    kind: Literal["org_unit"]
    org_unit: str = Field(..., min_length=1)


class AnyOrgUnitSpec(_Spec):
    """Caller certificate must list one of `org_units`."""

    kind: Literal["any_org_unit"]
    org_units: list[str] = Field(..., min_length=1)


class RoleSpec(_Spec):
    """Caller role attribute must equal `role`."""

    kind: Literal["role"]
    role: str = Field(..., min_length=1)


class AnyRoleSpec(_Spec):
    """Caller role attribute must be one of `roles`."""

    kind: Literal["any_role"]
    roles: list[str] = Field(..., min_length=1)


class AttributeSpec(_Spec):
    """Caller must carry `attribute`; equal to `value` when value is set."""

    kind: Literal["attribute"]
    attribute: str = Field(..., min_length=1)
    value: str = Field(
        default="",
        description="Expected value (empty = presence only)",
    )


class HasAttributeSpec(_Spec):
    """Caller must carry `attribute`."""

    kind: Literal["has_attribute"]
    attribute: str = Field(..., min_length=1)


class PlatformAdminSpec(_Spec):
    kind: Literal["platform_admin"]


class PlatformClientSpec(_Spec):
    kind: Literal["platform_client"]


class AlwaysDenySpec(_Spec):
    kind: Literal["always_deny"]
    message: str = ""


class CustomSpec(_Spec):
    """Reference to a custom rule registered in code."""

    kind: Literal["custom"]
    name: str = Field(..., min_length=1)


class AndSpec(_Spec):
    kind: Literal["and"]
    rules: list["RuleSpec"] = Field(default_factory=list)


class OrSpec(_Spec):
    kind: Literal["or"]
    rules: list["RuleSpec"] = Field(default_factory=list)


class NotSpec(_Spec):
    kind: Literal["not"]
    rule: "RuleSpec"


RuleSpec = Annotated[
    Union[
        OrganizationSpec,
        AnyOrganizationSpec,
        OrgUnitSpec,
        AnyOrgUnitSpec,
        RoleSpec,
        AnyRoleSpec,
        AttributeSpec,
        HasAttributeSpec,
        PlatformAdminSpec,
        PlatformClientSpec,
        AlwaysDenySpec,
        CustomSpec,
        AndSpec,
        OrSpec,
        NotSpec,
    ],
    Field(discriminator="kind"),
]

AndSpec.model_rebuild()
OrSpec.model_rebuild()
NotSpec.model_rebuild()


# =============================================================================
# Documents
# =============================================================================


class PolicyDocument(_Spec):
    """
    A declarative policy: top-level rules checked in order, all must pass.

    Attributes:
        version: Schema version for forward compatibility
        name: Optional name for this policy
        description: Optional description of what the policy protects
        rules: Top-level rules (empty = no restrictions)
    """

    version: str = Field(
        default="1.0",
        description="Policy schema version",
    )
    name: str | None = Field(
        default=None,
        description="Optional name for this policy",
    )
    description: str | None = Field(
        default=None,
        description="Optional description of this policy",
    )
    rules: list[RuleSpec] = Field(
        default_factory=list,
        description="Top-level rules, evaluated as an implicit AND",
    )


class IdentityDocument(_Spec):
    """
    A caller identity described as plain data.

    Attributes:
        id: Unique identity id
        organization_id: Issuing organization
        organizational_units: Certificate OU entries
        attributes: Identity attributes (role, hf.Type, ...)
        failing: Lookups that should fail, for simulating provider errors
    """

    id: str = Field(default="", description="Unique identity id")
    organization_id: str = Field(..., description="Issuing organization id")
    organizational_units: list[str] = Field(
        default_factory=list,
        description="Certificate organizational units",
    )
    attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Identity attributes",
    )
    failing: list[str] = Field(
        default_factory=list,
        description="Identity lookups that raise IdentityError",
    )


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def _validate(model: type[_Spec], data: Any, source: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise PolicyValidationError(path=source, validation_error=str(e)) from e


def _parse_yaml(content: str, source: str) -> Any:
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise PolicyValidationError(path=source, validation_error=str(e)) from e


def load_policy(path: Path | str) -> PolicyDocument:
    """
    Load a policy from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        PolicyValidationError: If the YAML is malformed or doesn't match the schema
    """
    path = Path(path)
    content = path.read_text()
    return _validate(PolicyDocument, _parse_yaml(content, str(path)), str(path))


def load_policy_from_string(content: str) -> PolicyDocument:
    """Load a policy from a YAML string."""
    return _validate(PolicyDocument, _parse_yaml(content, "<string>"), "<string>")


def load_identity(path: Path | str) -> IdentityDocument:
    """
    Load an identity from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        PolicyValidationError: If the YAML is malformed or doesn't match the schema
    """
    path = Path(path)
    content = path.read_text()
    return _validate(IdentityDocument, _parse_yaml(content, str(path)), str(path))


def load_identity_from_string(content: str) -> IdentityDocument:
    """Load an identity from a YAML string."""
    return _validate(IdentityDocument, _parse_yaml(content, "<string>"), "<string>")
