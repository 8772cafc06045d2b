"""Tagged results returned by service actions.

Service actions never raise to their callers.  They catch upstream and
invariant errors at their own boundary, log them, and hand back an
:class:`ActionResult` that is either ``ok`` with a value or failed with
an :class:`ErrorKind`.  The API layer decides how each kind surfaces.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from integrations.appwrite_client import SERVICE_NAME as APPWRITE_SERVICE_NAME
from integrations.exceptions import UpstreamAuthError, UpstreamError

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Why an action produced no value."""

    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    UNAUTHENTICATED = "unauthenticated"
    UPSTREAM = "upstream"
    INVARIANT = "invariant"


class ActionError(Exception):
    """Raised inside an action to abort it with a specific ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        super().__init__(message)


class InvariantError(ActionError):
    """An upstream call succeeded but did not produce what it should have."""

    def __init__(self, message: str):
        super().__init__(ErrorKind.INVARIANT, message)


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""
    step: Optional[str] = None  # failing step, for multi-step actions

    @classmethod
    def ok(cls, value: T) -> "ActionResult[T]":
        return cls(value=value)

    @classmethod
    def fail(
        cls, error: ErrorKind, message: str = "", step: Optional[str] = None
    ) -> "ActionResult[T]":
        return cls(error=error, message=message, step=step)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap_or_none(self) -> Optional[T]:
        """The value, or ``None`` when the action failed."""
        return self.value if self.is_ok else None


def classify_exception(exc: Exception) -> ErrorKind:
    """Map an exception caught at an action boundary to an ErrorKind.

    Only an Appwrite credential failure means the caller is not signed in.
    Plaid or Dwolla rejecting our own keys is an upstream fault.
    """
    if isinstance(exc, ActionError):
        return exc.kind
    if isinstance(exc, UpstreamAuthError) and exc.service_name == APPWRITE_SERVICE_NAME:
        return ErrorKind.UNAUTHENTICATED
    if isinstance(exc, UpstreamError):
        return ErrorKind.UPSTREAM
    return ErrorKind.INVARIANT
