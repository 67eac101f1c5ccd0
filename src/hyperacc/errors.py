"""
Exception hierarchy for hyperacc.

All hyperacc exceptions inherit from HyperaccError, allowing callers to catch
all library-specific exceptions with a single except clause.

Exception Categories:
    - AccessError: Policy evaluation decided access is not granted
    - IdentityError: Caller identity data could not be read
    - PolicyFileError: A declarative policy/identity document is invalid

The split between AccessError and IdentityError is the important one:
a host typically rejects the transaction in both cases, but only an
AccessError is a policy outcome. An IdentityError means "could not
determine identity" and may warrant a retry or an alert instead.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Access errors: 1xxx
ERROR_ACCESS_DENIED = 1001

# Identity errors: 2xxx
ERROR_IDENTITY_LOOKUP = 2001
ERROR_IDENTITY_ATTRIBUTE_MISSING = 2002
ERROR_IDENTITY_ASSERTION_FAILED = 2003

# Policy file errors: 3xxx
ERROR_POLICY_FILE_INVALID = 3001
ERROR_POLICY_CUSTOM_RULE_NOT_FOUND = 3002

DEFAULT_DENIAL_REASON = "access denied"


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class HyperaccError(Exception):
    """
    Base exception for all hyperacc errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Access Errors
# =============================================================================


@dataclass(frozen=True)
class RuleFailure:
    """One failing child of a combinator: its 1-based position and error."""

    position: int
    error: BaseException

    @property
    def is_denial(self) -> bool:
        return isinstance(self.error, AccessError)

    def describe(self) -> str:
        return f"rule {self.position}: {error_text(self.error)}"


@dataclass
class AccessError(HyperaccError):
    """
    Raised when policy evaluation denies access.

    This is an expected outcome, never a bug: the rule tree looked at the
    caller and said no.

    Attributes:
        reason: Why access was denied (never empty)
        cause: Underlying error this denial wraps, if any
        failures: Child failures an aggregated (AND/OR) denial was built from
    """

    reason: str = ""
    cause: BaseException | None = None
    failures: tuple[RuleFailure, ...] = ()

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.reason:
            self.reason = DEFAULT_DENIAL_REASON
        if not self.message:
            if self.cause is not None:
                self.message = f"{self.reason}: {error_text(self.cause)}"
            else:
                self.message = self.reason
        if self.code == 0:
            self.code = ERROR_ACCESS_DENIED
        if self.cause is not None and self.__cause__ is None:
            self.__cause__ = self.cause
        self.context.update({
            "reason": self.reason,
            "failed_rules": [f.position for f in self.failures],
        })

    def unwrap(self) -> BaseException | None:
        """Return the directly wrapped error, if any."""
        return self.cause

    def chain(self) -> Iterator[BaseException]:
        """Iterate this error and every error it wraps, outermost first."""
        return iter_error_chain(self)

    def root_cause(self) -> BaseException:
        """Return the innermost error of the chain."""
        return root_cause(self)

    @property
    def infrastructure_failures(self) -> tuple[RuleFailure, ...]:
        """Child failures that were not themselves policy denials."""
        return tuple(f for f in self.failures if not f.is_denial)


def new_access_error(reason: str) -> AccessError:
    """Create a denial with the given reason."""
    return AccessError(reason=reason)


def wrap_access_error(reason: str, cause: BaseException) -> AccessError:
    """Create a denial that keeps `cause` in its chain."""
    return AccessError(reason=reason, cause=cause)


# =============================================================================
# Identity Errors
# =============================================================================


@dataclass
class IdentityError(HyperaccError):
    """
    Raised when caller identity data cannot be retrieved.

    These are infrastructure failures, not policy outcomes. Predicate rules
    let them propagate unchanged so callers can tell "policy says no" apart
    from "could not determine identity".

    Attributes:
        operation: The identity lookup that failed (e.g., "get_organization_id")
        underlying_error: Description of what went wrong
    """

    operation: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Identity lookup {self.operation} failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_IDENTITY_LOOKUP
        self.context.update({
            "operation": self.operation,
            "underlying_error": self.underlying_error,
        })


@dataclass
class MissingAttributeError(IdentityError):
    """Raised when an attribute a rule cannot do without is absent."""

    attribute: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"{self.attribute} attribute not found in identity"
        if self.code == 0:
            self.code = ERROR_IDENTITY_ATTRIBUTE_MISSING
        if not self.operation:
            self.operation = "get_attribute"
        if not self.suggestion:
            self.suggestion = f"Enroll the identity with a '{self.attribute}' attribute"
        super().__post_init__()
        self.context["attribute"] = self.attribute


@dataclass
class AttributeAssertionError(IdentityError):
    """Raised by assert_attribute when an attribute is absent or differs."""

    attribute: str = ""
    expected: str = ""
    actual: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            if self.actual is None:
                self.message = f"attribute '{self.attribute}' was not found"
            else:
                self.message = (
                    f"attribute '{self.attribute}' equals '{self.actual}', "
                    f"not '{self.expected}'"
                )
        if self.code == 0:
            self.code = ERROR_IDENTITY_ASSERTION_FAILED
        if not self.operation:
            self.operation = "assert_attribute"
        super().__post_init__()
        self.context.update({
            "attribute": self.attribute,
            "expected": self.expected,
            "actual": self.actual,
        })


# =============================================================================
# Policy File Errors
# =============================================================================


@dataclass
class PolicyFileError(HyperaccError):
    """
    Base class for errors in declarative policy or identity documents.

    Attributes:
        path: File the document was read from ("<string>" for inline text)
    """

    path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if self.code == 0:
            self.code = ERROR_POLICY_FILE_INVALID
        self.context["path"] = self.path


@dataclass
class PolicyValidationError(PolicyFileError):
    """Raised when a document fails YAML parsing or schema validation."""

    validation_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid document {self.path}: {self.validation_error}"
        super().__post_init__()
        self.context["validation_error"] = self.validation_error


@dataclass
class CustomRuleNotFoundError(PolicyFileError):
    """Raised when a policy references a custom rule nobody registered."""

    rule_name: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Custom rule not registered: {self.rule_name}"
        if self.code == 0:
            self.code = ERROR_POLICY_CUSTOM_RULE_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Register the rule with register_custom_rule() before loading the policy"
        super().__post_init__()
        self.context["rule_name"] = self.rule_name


# =============================================================================
# Chain Helpers
# =============================================================================


def error_text(err: BaseException) -> str:
    """Message of an error without the [Ecode] prefix used by __str__."""
    if isinstance(err, HyperaccError):
        return err.message
    return str(err) or err.__class__.__name__


def iter_error_chain(err: BaseException) -> Iterator[BaseException]:
    """
    Walk an error and everything it wraps.

    AccessError.cause is followed first, then the explicit `raise ... from`
    link (__cause__). Implicit exception context is not followed.
    """
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if isinstance(current, AccessError) and current.cause is not None:
            current = current.cause
        else:
            current = current.__cause__


def root_cause(err: BaseException) -> BaseException:
    """Return the innermost error in the chain of `err`."""
    last = err
    for last in iter_error_chain(err):
        pass
    return last


def as_access_error(err: BaseException | None) -> AccessError | None:
    """Return the first AccessError in the chain of `err`, or None."""
    if err is None:
        return None
    for item in iter_error_chain(err):
        if isinstance(item, AccessError):
            return item
    return None


def is_access_error(err: BaseException | None) -> bool:
    """True when `err` (or anything it wraps) is a policy denial."""
    return as_access_error(err) is not None
