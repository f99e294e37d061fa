"""
Application error taxonomy. Every error maps to one HTTP status and is
rendered as ``{"error": message}`` by the handlers registered in main.
"""


class AppError(Exception):
    """Base class for errors that are safe to show to the caller."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class AuthError(AppError):
    """Missing or invalid session cookie or device token."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ConflictError(AppError):
    status_code = 409


class InternalError(AppError):
    """Persistence or other unexpected failure; details stay in the log."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
