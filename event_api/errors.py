"""
Domain errors shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to. Note that missing entities
are reported as 400, not 404, to match the public API contract.
"""

from typing import Optional


class APIError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(APIError):
    status_code = 400
    default_message = "Invalid input"


class InvalidDateError(ValidationError):
    default_message = "invalid date format, required YYYY-MM-DDTHH:mm:ss.sssZ"


class ConflictError(APIError):
    status_code = 400
    default_message = "user already exists"


class NotFoundError(APIError):
    status_code = 400
    default_message = "Not found"


class InvalidCredentialsError(APIError):
    status_code = 401
    default_message = "Invalid credentials"


class AccountLockedError(APIError):
    status_code = 403
    default_message = "Account locked due to too many failed attempts. Try again later."


class UnauthorizedError(APIError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidTokenError(UnauthorizedError):
    default_message = "invalid token"


class TokenExpiredError(UnauthorizedError):
    default_message = "token expired"
