"""Typed exception hierarchy for upstream service errors.

Every integration client (Appwrite, Plaid, Dwolla) translates its
transport failures into these so that services can tell auth problems
from transient network trouble from malformed responses.
"""


class UpstreamError(Exception):
    """Base exception for all errors raised by an external service.

    Carries the service name so callers can identify which upstream failed.
    """

    def __init__(self, message: str, service_name: str = ""):
        self.service_name = service_name
        super().__init__(message)


class UpstreamAuthError(UpstreamError):
    """Credentials or session missing, expired, or invalid (HTTP 401/403)."""

    pass


class UpstreamConnectionError(UpstreamError):
    """Network failures: timeouts, DNS resolution, connection refused.

    Retriable by default.
    """

    def __init__(self, message: str, service_name: str = "", retriable: bool = True):
        self.retriable = retriable
        super().__init__(message, service_name)


class UpstreamAPIError(UpstreamError):
    """HTTP 4xx/5xx responses from the upstream API."""

    def __init__(
        self,
        message: str,
        service_name: str = "",
        status_code: int | None = None,
        error_code: str | None = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message, service_name)

    @property
    def retriable(self) -> bool:
        """429 (rate limit) and 5xx errors are generally retriable."""
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class UpstreamDataError(UpstreamError):
    """Malformed or unexpected response from the upstream service."""

    pass


def raise_for_status(status_code: int, message: str, service_name: str, error_code: str | None = None) -> None:
    """Raise the matching :class:`UpstreamError` subclass for an HTTP status.

    Does nothing for 2xx/3xx codes.
    """
    if status_code < 400:
        return
    if status_code in (401, 403):
        raise UpstreamAuthError(message, service_name=service_name)
    raise UpstreamAPIError(
        message,
        service_name=service_name,
        status_code=status_code,
        error_code=error_code,
    )
