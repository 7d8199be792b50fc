"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP responses
by centralized exception handlers in main.py, maintaining proper separation of concerns.

The authentication module (auth.py) also uses these domain exceptions to remain
HTTP-agnostic, allowing reuse in non-HTTP contexts (CLI tools, seed scripts).

Every exception carries a correlation ID for Sentry and user error reporting.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class AuthenticationException(DomainException):
    """
    Raised when a request cannot be authenticated.

    ``error_code`` lets clients tell an expired session apart from a
    malformed or missing credential.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "invalid_token",
        correlation_id: str | None = None,
    ):
        super().__init__(message, correlation_id)
        self.error_code = error_code


class AlreadyExistsException(DomainException):
    """Raised when trying to create a resource that already exists."""

    pass


class StoreConnectionException(DomainException):
    """Raised when the database cannot be reached after all retries."""

    pass


# Specific exceptions for domain entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class UserAlreadyExistsException(AlreadyExistsException):
    """Email is already registered."""

    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class PostNotFoundException(NotFoundException):
    """Post not found."""

    def __init__(self, message: str = "Post not found"):
        super().__init__(message)


class CommentNotFoundException(NotFoundException):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message)


class NotificationNotFoundException(NotFoundException):
    """Notification missing or owned by another user."""

    def __init__(
        self, message: str = "Notification not found or does not belong to user"
    ):
        super().__init__(message)


class TopicNotFoundException(NotFoundException):
    """Topic not found."""

    def __init__(self, message: str = "Topic not found"):
        super().__init__(message)


class LocationNotFoundException(NotFoundException):
    """Location not found."""

    def __init__(self, message: str = "Location not found"):
        super().__init__(message)


class InvalidCredentialsException(AuthenticationException):
    """Invalid email or password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, error_code="invalid_credentials")


class MissingTokenException(AuthenticationException):
    """No bearer token on a protected route."""

    def __init__(self, message: str = "No auth token, access denied"):
        super().__init__(message, error_code="missing_token")


class TokenExpiredException(AuthenticationException):
    """Bearer token signature has expired."""

    def __init__(self, message: str = "Your session has expired. Please log in again."):
        super().__init__(message, error_code="token_expired")


class InvalidTokenException(AuthenticationException):
    """Bearer token is malformed, forged or of the wrong kind."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, error_code="invalid_token")


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass


class InvalidVoteDirectionException(ValidationException):
    """Vote direction outside {-1, 0, 1}."""

    def __init__(self, message: str = "Invalid vote direction"):
        super().__init__(message)


class InvalidUploadException(ValidationException):
    """Uploaded file rejected (type, extension or size)."""

    pass
