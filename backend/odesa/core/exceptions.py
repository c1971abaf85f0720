# odesa/core/exceptions.py


class AppError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class DuplicateEmail(AppError):
    status_code = 400
    message = "User already exists with this email"


class InvalidCredentials(AppError):
    status_code = 401
    message = "Invalid email or password"


class InvalidOrExpiredToken(AppError):
    status_code = 400
    message = "Invalid or expired reset token"


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class Forbidden(AppError):
    status_code = 403
    message = "Not authorized"


class Conflict(AppError):
    status_code = 409
    message = "Conflict"


class ServiceUnavailable(AppError):
    status_code = 503
    message = "Service unavailable"


class UpstreamServiceError(AppError):
    """A billing or AI provider call failed; message carries the upstream text."""
    status_code = 500


class StorageError(AppError):
    status_code = 500
    message = "Storage operation failed"
