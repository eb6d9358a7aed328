"""Error taxonomy shared by every layer.

ValidationError: bad input caught before the network, or structured 4xx field errors.
AuthError: login/register rejected.
RemoteError and its subclasses: classified failures of an API round-trip.
"""


class CircleError(Exception):
    """Base class for all errors raised by the circle core."""


class ValidationError(CircleError):
    """Input rejected locally or by the server with field errors. Recoverable by editing input."""

    def __init__(
        self,
        message: str,
        field_errors: dict[str, str] | None = None,
        *,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field_errors = dict(field_errors or {})
        self.status = status


class UnsupportedFormatError(ValidationError):
    """Import file extension is neither .json nor .csv. Raised before any upload."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"Unsupported import file format: {filename!r}. Use .json or .csv.")
        self.filename = filename


class AuthError(CircleError):
    """Login or registration rejected."""

    INVALID_CREDENTIALS = "invalid_credentials"
    DUPLICATE_IDENTITY = "duplicate_identity"
    INVALID_PROFILE = "invalid_profile"

    def __init__(self, reason: str, message: str = "") -> None:
        super().__init__(message or reason)
        self.reason = reason
        self.message = message or reason


class RemoteError(CircleError):
    """An API call failed. status is None when no HTTP response was received."""

    def __init__(self, status: int | None, message: str) -> None:
        super().__init__(f"[{status}] {message}" if status is not None else message)
        self.status = status
        self.message = message


class AuthorizationError(RemoteError):
    """401/403. Not retried; the caller must log in again."""


class SessionExpired(AuthorizationError):
    """The session was cleared (or was never present) so the request cannot be made."""


class NotFoundError(RemoteError):
    """404."""


class TransientError(RemoteError):
    """Network failure, timeout or 5xx. Safe for the caller to retry explicitly."""
