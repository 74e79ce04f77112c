"""
Custom exceptions for standardized error handling.
"""
from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base exception class for the application."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: str = "UNKNOWN_ERROR",
        headers: dict = None
    ):
        super().__init__(
            status_code=status_code,
            detail=detail,
            headers={"code": code, **(headers or {})}
        )
        self.code = code


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, detail: str = "No auth token provided"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class WebhookAuthError(AppException):
    """Inbound webhook carried a missing or wrong shared secret."""

    def __init__(self, detail: str = "Unauthorized webhook request"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            code="WEBHOOK_UNAUTHORIZED"
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
            code="NOT_FOUND"
        )


class ValidationError(AppException):
    """Validation failed."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            code="VALIDATION_ERROR"
        )


class ServiceUnavailableError(AppException):
    """A collaborator the request depends on is not available."""

    def __init__(self, detail: str = "Service unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            code="SERVICE_UNAVAILABLE"
        )
