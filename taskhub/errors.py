from typing import Dict, Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for errors raised by the service layer.

    Subclasses carry their HTTP status and a default message, so they can be
    raised from any layer and FastAPI renders them as ``{"detail": ...}``.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.message,
            headers=type(self).headers,
        )


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class MissingField(ValidationError):
    message = "All fields are required"


class InvalidResponse(ValidationError):
    message = "Valid response (accepted/rejected) is required"


class InvalidStatus(ValidationError):
    message = "Valid status is required"


class Conflict(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists"


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Could not validate credentials"
    headers = {"WWW-Authenticate": "Bearer"}


class BadCredentials(Unauthenticated):
    message = "Invalid credentials"


class NoSuchUser(Unauthenticated):
    message = "User does not exist"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class TaskNotRespondable(NotFound):
    message = "Task not found or already responded"


class Internal(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"
