"""Error taxonomy shared by the session, store and bulk layers."""


class UptimeDashError(Exception):
    """Base class for all client errors."""

    pass


class AuthExpired(UptimeDashError):
    """Raised when the backend rejects the credential (HTTP 401).

    The session has already been torn down and the user notified by the time
    this reaches a handler, so handlers must not report it again.
    """

    def __init__(self, message: str = "Session expired") -> None:
        super().__init__(message)


class AuthError(UptimeDashError):
    """Raised when a login attempt is rejected."""

    pass


class ValidationError(UptimeDashError):
    """Raised when input fails a client-side precondition.

    Attributes:
        details: Optional mapping of field name to error message.
    """

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class RegistrationError(ValidationError):
    """Raised when the backend rejects a registration."""

    pass


class NetworkError(UptimeDashError):
    """Raised when a request cannot complete or returns a non-success status.

    Attributes:
        status_code: HTTP status code, or None if no response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
