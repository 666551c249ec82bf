"""Typed failures raised by the reservation core.

Each failure is an ``HTTPException`` so routers can let them propagate and
FastAPI renders the matching status code.
"""
from __future__ import annotations

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Field-scoped rejection of a request. Never retried."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": message, "errors": {field: [message]}},
        )


class ContentionError(HTTPException):
    """A shared resource stayed busy past the bounded wait; the caller may retry."""

    def __init__(self, detail: str = "Resource is busy, please retry", retry_after: int = 1) -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            headers={"Retry-After": str(retry_after)},
        )


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "This action is unauthorized") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
