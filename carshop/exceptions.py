"""
Error taxonomy for the CarShop API.

Every error a request can end in is a ``ServiceError`` subclass carrying the
HTTP status and the message shown to the caller. The app factory registers a
single handler that renders them into the standard response envelope.
"""
from fastapi import status

NOT_AUTHORIZED_MESSAGE = "You are not authorized to access this resource"


class ServiceError(Exception):
    """Base class for errors that terminate a request."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"
    headers = None

    def __init__(self, message: str = None, reason: str = None):
        if message is not None:
            self.message = message
        # reason is only logged, never sent to the caller
        self.reason = reason or self.message
        super().__init__(self.message)


class MissingAuthorization(ServiceError):
    """No usable ``Authorization: Bearer <token>`` header."""
    status_code = status.HTTP_401_UNAUTHORIZED
    message = NOT_AUTHORIZED_MESSAGE
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidToken(ServiceError):
    """The identity provider rejected the token (expired, malformed, revoked)."""
    status_code = status.HTTP_401_UNAUTHORIZED
    message = NOT_AUTHORIZED_MESSAGE
    headers = {"WWW-Authenticate": "Bearer"}


class UserNotFound(ServiceError):
    """A verified identity has no matching application account."""
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class Unauthorized(ServiceError):
    """The caller is known but their role does not allow the action."""
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "You do not have permission to perform this action"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    message = "Resource already exists"


class StoreFailure(ServiceError):
    """The document store raised; the message is the underlying error text."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Database operation failed"


class Timeout(ServiceError):
    """An identity provider or store call exceeded its time budget."""
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    message = "Upstream operation timed out"
