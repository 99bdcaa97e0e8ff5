"""
Service-layer errors.

Services raise these instead of HTTP exceptions; `api/main.py` maps them to
responses through a single exception handler.
"""

from __future__ import annotations


class ServiceError(RuntimeError):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConflictError(ServiceError):
    """Raised when a unique user attribute (email/username) is already taken."""

    status_code = 409


class UnauthorizedError(ServiceError):
    """Raised for bad credentials and for missing, invalid or dangling tokens."""

    status_code = 401


class ForbiddenError(ServiceError):
    """Raised when a record exists but belongs to another user."""

    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404
