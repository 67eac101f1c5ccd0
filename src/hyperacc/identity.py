"""
Identity context interface for hyperacc.

Rules never talk to a certificate store or a transaction stub directly.
Everything they know about the caller comes through an IdentityContext,
supplied by the host per evaluation:

- IdentityContext: Abstract capability the host implements
- Certificate: The certificate fields rules care about
- StaticIdentity: In-memory context for tests and offline policy checks
- CallerInfo / get_caller_info: Summary of the caller for diagnostics

Implementations raise IdentityError (or any host exception) when a lookup
fails. Rules propagate those errors unchanged.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from hyperacc.errors import AttributeAssertionError, IdentityError

ROLE_ATTRIBUTE = "role"
PLATFORM_TYPE_ATTRIBUTE = "hf.Type"


@dataclass(frozen=True)
class Certificate:
    """
    Subject fields of the caller's certificate.

    Attributes:
        organizational_units: OU entries of the certificate subject, in order
    """

    organizational_units: tuple[str, ...] = ()


class IdentityContext(ABC):
    """
    Read-only view of the verified caller identity for one evaluation.

    The engine treats every call as synchronous and side-effect free.
    Credentials are assumed to be authenticated upstream.
    """

    @abstractmethod
    def get_id(self) -> str:
        """Unique identifier of the caller within its organization."""
        ...

    @abstractmethod
    def get_organization_id(self) -> str:
        """Identifier of the organization (MSP) that issued the identity."""
        ...

    @abstractmethod
    def get_attribute(self, name: str) -> tuple[str, bool]:
        """
        Look up a named attribute.

        Returns:
            (value, found). value is "" when found is False.
        """
        ...

    @abstractmethod
    def assert_attribute(self, name: str, expected: str) -> None:
        """Raise unless attribute `name` is present and equals `expected`."""
        ...

    @abstractmethod
    def get_certificate(self) -> Certificate:
        """Parsed certificate of the caller."""
        ...


class StaticIdentity(IdentityContext):
    """
    IdentityContext backed by plain values.

    Used as a deterministic test double and by the CLI to dry-run policies
    against an identity described in YAML. Lookups named in `failing` raise
    IdentityError, simulating a broken identity provider.

    Usage:
        ctx = StaticIdentity(
            organization_id="Org1MSP",
            organizational_units=["sales"],
            attributes={"role": "admin"},
        )
    """

    def __init__(
        self,
        organization_id: str = "",
        id: str = "",
        organizational_units: Iterable[str] = (),
        attributes: Mapping[str, str] | None = None,
        failing: Iterable[str] = (),
    ) -> None:
        self._organization_id = organization_id
        self._id = id
        self._certificate = Certificate(tuple(organizational_units))
        self._attributes = dict(attributes or {})
        self._failing = frozenset(failing)

    def _maybe_fail(self, operation: str) -> None:
        if operation in self._failing:
            raise IdentityError(
                operation=operation,
                underlying_error="identity provider unavailable",
            )

    def get_id(self) -> str:
        self._maybe_fail("get_id")
        return self._id

    def get_organization_id(self) -> str:
        self._maybe_fail("get_organization_id")
        return self._organization_id

    def get_attribute(self, name: str) -> tuple[str, bool]:
        self._maybe_fail("get_attribute")
        if name in self._attributes:
            return self._attributes[name], True
        return "", False

    def assert_attribute(self, name: str, expected: str) -> None:
        self._maybe_fail("assert_attribute")
        actual = self._attributes.get(name)
        if actual != expected:
            raise AttributeAssertionError(
                attribute=name,
                expected=expected,
                actual=actual,
            )

    def get_certificate(self) -> Certificate:
        self._maybe_fail("get_certificate")
        return self._certificate

    def __repr__(self) -> str:
        return (
            f"StaticIdentity(organization_id={self._organization_id!r}, "
            f"id={self._id!r})"
        )


# =============================================================================
# Caller Info
# =============================================================================


@dataclass(frozen=True)
class CallerInfo:
    """
    Summary of the current caller.

    Attributes:
        organization_id: Issuing organization of the identity
        id: Unique identity id
        role: Value of the "role" attribute ("" when absent)
        organizational_units: OU entries from the certificate
    """

    organization_id: str
    id: str
    role: str = ""
    organizational_units: tuple[str, ...] = field(default_factory=tuple)


def get_caller_info(ctx: IdentityContext) -> CallerInfo:
    """
    Collect diagnostic information about the caller.

    A missing role is not an error here. Lookup failures propagate.
    """
    caller_id = ctx.get_id()
    role, found = ctx.get_attribute(ROLE_ATTRIBUTE)
    return CallerInfo(
        organization_id=ctx.get_organization_id(),
        id=caller_id,
        role=role if found else "",
        organizational_units=tuple(ctx.get_certificate().organizational_units),
    )


def has_attribute(ctx: IdentityContext, name: str) -> bool:
    """True when the caller carries attribute `name`, whatever its value."""
    _, found = ctx.get_attribute(name)
    return found
