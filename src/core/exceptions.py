"""Custom exception classes for the magazine contribution backend.

Managers raise these typed errors; ``app.py`` maps each of them to an HTTP
status code. Anything not derived from ``MagazineError`` is reported as an
internal failure.
"""


class MagazineError(Exception):
    """Base exception for all magazine backend errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        """Initialize the exception.

        Args:
            message: Human readable reason, returned to the client.
        """
        self.message = message
        super().__init__(message)


class ValidationError(MagazineError):
    """Raised when input is invalid or a business rule is violated."""

    status_code = 400


class UnauthorizedError(MagazineError):
    """Raised when credentials are missing, invalid, expired or inactive."""

    status_code = 401


class ForbiddenError(MagazineError):
    """Raised when an authenticated user may not view or act on a resource."""

    status_code = 403


class NotFoundError(MagazineError):
    """Raised when a requested user cannot be found."""

    status_code = 404


class NotificationError(MagazineError):
    """Raised when a mandatory email notification could not be delivered."""

    pass
