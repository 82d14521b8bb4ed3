# errors.py
"""
Application error taxonomy. Handlers in main.py turn every AppError into the
standard ``{"success": false, "message": ...}`` envelope.
"""


class AppError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(AppError):
    status_code = 400
    message = "Invalid request"


class InvalidOrExpired(AppError):
    status_code = 400
    message = "Invalid or expired OTP code"


class Conflict(AppError):
    status_code = 400
    message = "Resource already exists"


class InvalidCredentials(AppError):
    status_code = 401
    message = "Invalid credentials"


class Unauthorized(AppError):
    status_code = 401
    message = "User not authorized"


class Forbidden(AppError):
    status_code = 403
    message = "Insufficient permissions"


class NotVerified(AppError):
    status_code = 403
    message = "Please verify your email before logging in."


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class ServiceUnavailable(AppError):
    status_code = 503
    message = "Service temporarily unavailable"
