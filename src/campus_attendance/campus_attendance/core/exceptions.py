class DomainError(Exception):
    """Base exception for business rule violations.

    ``kind`` and ``http_status`` let the API layer render a structured error
    without knowing every subclass.
    """

    kind = "domain_error"
    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation"
    http_status = 400


class NotFoundError(DomainError):
    """Raised when a session or request id is unknown."""

    kind = "not_found"
    http_status = 404


class ConflictError(DomainError):
    """Raised on duplicate check-ins/requests or invalid state transitions."""

    kind = "conflict"
    http_status = 409


class SessionUnavailableError(DomainError):
    """Raised when a check-in targets a session that is not active."""

    kind = "session_unavailable"
    http_status = 409


class AuthenticationError(DomainError):
    """Raised when no identity was supplied with the request."""

    kind = "unauthenticated"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "permission"
    http_status = 403
