"""Application error types.

Every error carries the HTTP status and the ``{error, message, details?}``
body it is rendered as by the handlers registered in ``src.main``.
"""

from typing import Any

from fastapi import status


class AuthAPIError(Exception):
    """Base class for errors that map onto an API response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal server error"
    message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: list[str] | None = None):
        if message is not None:
            self.message = message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AuthAPIError):
    """One or more input rules failed. ``details`` lists every violation."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation failed"
    message = "The request contains invalid data"

    def __init__(self, details: list[str], message: str | None = None):
        super().__init__(message=message, details=list(details))


class DuplicateEmailError(AuthAPIError):
    status_code = status.HTTP_409_CONFLICT
    error = "User already exists"
    message = "A user with this email address already exists"


class InvalidCredentialsError(AuthAPIError):
    """Raised for both unknown email and wrong password."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Invalid credentials"
    message = "Email or password is incorrect"


class AccountInactiveError(AuthAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Account deactivated"
    message = "Your account has been deactivated. Please contact support."


class InvalidCurrentPasswordError(AuthAPIError):
    # 400 rather than 401: the caller is authenticated, the field is wrong.
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid current password"
    message = "The current password you entered is incorrect"


class MissingTokenError(AuthAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Access token required"
    message = "Please provide a valid access token"


class TokenInvalidError(AuthAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Invalid token"
    message = "The provided token is invalid"


class TokenExpiredError(AuthAPIError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Token expired"
    message = "Your session has expired. Please login again."


class UserNotFoundError(AuthAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "User not found"
    message = "Your account could not be found"


class StoreError(AuthAPIError):
    """A persistence failure that is not one of the classified conflicts."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal server error"
    message = "An unexpected error occurred"
