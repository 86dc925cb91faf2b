"""Domain errors raised by the service layer.

Each error carries the HTTP status the API layer answers with, so route
handlers never translate errors by hand.
"""

from fastapi import status


class PortalError(Exception):
    """Base class for all expected portal errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Forbidden(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Action not permitted"


class DuplicateApplication(PortalError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "You have already applied for this job"


class InvalidStatus(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid status value"


class InvalidState(PortalError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Operation not allowed in the current state"


class ValidationError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


# Webhook and form callers know this one as BadRequest
BadRequest = ValidationError


class Unauthorized(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ServerError(PortalError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
