"""
Denial notification for hyperacc.

When a check fails, the host may want to publish an "AccessDenied" event
(for example as a chaincode event) describing who was refused and why.
The event sink is an explicit Notifier passed by the caller; there is no
global state.

Notification is best effort: if building the payload or emitting the event
fails, the failure is logged and swallowed so that it never masks the
denial itself.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from hyperacc.errors import as_access_error, error_text
from hyperacc.identity import IdentityContext, get_caller_info

logger = logging.getLogger(__name__)

ACCESS_DENIED_EVENT = "AccessDenied"


class Notifier(ABC):
    """Sink for events emitted by hyperacc."""

    @abstractmethod
    def emit(self, event_name: str, payload: bytes) -> None:
        """Publish an event. May raise; callers treat failures as non-fatal."""
        ...


class LoggingNotifier(Notifier):
    """Notifier that writes events to a logger at WARNING level."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def emit(self, event_name: str, payload: bytes) -> None:
        self._log.warning("%s: %s", event_name, payload.decode("utf-8", errors="replace"))


@dataclass(frozen=True)
class Event:
    """An event captured by MemoryNotifier."""

    name: str
    payload: bytes


class MemoryNotifier(Notifier):
    """Notifier that keeps emitted events in memory (tests, CLI reports)."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, event_name: str, payload: bytes) -> None:
        self.events.append(Event(event_name, payload))


def format_denial(ctx: IdentityContext, error: BaseException) -> str:
    """
    Build the AccessDenied payload text.

    Uses the denial reason when the error chain holds an AccessError,
    otherwise the error text. Falls back to "Error: <error>" when the
    caller identity itself cannot be read.
    """
    try:
        info = get_caller_info(ctx)
    except Exception as e:
        logger.debug("Caller info unavailable for denial event: %s", e)
        return f"Error: {error_text(error)}"

    access_error = as_access_error(error)
    reason = access_error.reason if access_error is not None else error_text(error)
    return (
        f"Access denied for organization={info.organization_id}, "
        f"id={info.id}, role={info.role}, reason: {reason}"
    )


def log_access_denied(
    ctx: IdentityContext,
    error: BaseException,
    notifier: Notifier,
) -> None:
    """Emit an AccessDenied event for `error`. Never raises."""
    try:
        payload = format_denial(ctx, error).encode("utf-8", errors="replace")
        notifier.emit(ACCESS_DENIED_EVENT, payload)
    except Exception as e:
        logger.warning("Failed to emit %s event: %s", ACCESS_DENIED_EVENT, e)
