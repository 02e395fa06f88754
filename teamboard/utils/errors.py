# teamboard/utils/errors.py
# Domain error taxonomy; main.py turns these into the JSON envelope
from typing import Any, Optional

from fastapi import status


class TeamboardError(Exception):
    """Base class for errors that surface to the caller with a status code"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(TeamboardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class AuthError(TeamboardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class AuthorizationError(TeamboardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You don't have permission to perform this action"


class NotFoundError(TeamboardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(TeamboardError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class UnexpectedError(TeamboardError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
