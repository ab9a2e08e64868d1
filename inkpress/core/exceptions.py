"""Domain error taxonomy shared by every service.

Services raise these; the application-level handler in ``inkpress.main``
turns them into HTTP responses, so routers never catch them.
"""

from typing import Any

from fastapi import status


class DomainError(Exception):
    """Base error raised by the service layer."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        code: str = "domain_error",
        errors: list[dict[str, Any]] | None = None,
    ):
        self.message = message
        self.code = code
        self.errors = errors or []
        super().__init__(message)


class ValidationError(DomainError):
    """Input violates a business rule."""

    def __init__(
        self,
        message: str = "Validation failed",
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message, "validation_error", errors)


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, "not_found")


class ForbiddenError(DomainError):
    """Actor is not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, "forbidden")


class InvalidStateError(DomainError):
    """Transition is not allowed from the entity's current state."""

    def __init__(self, message: str = "Operation not allowed in current state"):
        super().__init__(message, "invalid_state")


class ConflictError(DomainError):
    """Uniqueness could not be established (e.g. slug exhaustion)."""

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message, "conflict")


def error_body(
    message: str,
    status_code: int,
    request_id: str | None,
    errors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build the JSON body returned for any failed request."""
    body: dict[str, Any] = {
        "error": True,
        "message": message,
        "status_code": status_code,
        "request_id": request_id,
    }
    if errors:
        body["errors"] = errors
    return body
