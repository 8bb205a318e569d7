class GymFlowException(Exception):
    """
    Base exception for GymFlow.

    Each subclass carries the HTTP status and default error code used to
    build the response envelope. Extra keyword arguments are copied into
    the envelope as-is (e.g. ``membersCount`` for a blocked plan delete).
    """

    status_code: int = 500
    code: str = "SERVER_ERROR"

    def __init__(self, message: str, code: str | None = None, **extra):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.extra = extra


class ValidationException(GymFlowException):
    """Raised for input and business rule validation errors"""

    status_code = 400
    code = "VALIDATION_ERROR"


class UnauthorizedException(GymFlowException):
    """Raised when credentials or tokens are missing or invalid"""

    status_code = 401
    code = "AUTH_REQUIRED"


class ForbiddenException(GymFlowException):
    """Raised when a caller lacks the role or tenant access for a request"""

    status_code = 403
    code = "AUTH_FORBIDDEN"


class NotFoundException(GymFlowException):
    """Raised when a record does not exist or is not visible to the caller's tenant"""

    status_code = 404
    code = "NOT_FOUND"


class ConflictException(GymFlowException):
    """Raised on duplicates and on deletes blocked by references"""

    status_code = 409
    code = "CONFLICT"


class RateLimitException(GymFlowException):
    """Raised when a client exceeds the request budget"""

    status_code = 429
    code = "RATE_LIMITED"


class StorageException(GymFlowException):
    """Raised when the backing store fails; carries the underlying message"""

    status_code = 500
    code = "DATABASE_ERROR"
