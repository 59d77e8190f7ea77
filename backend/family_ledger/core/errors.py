from __future__ import annotations

from fastapi import HTTPException


class AppError(HTTPException):
    """Base class for errors that map onto a JSON error envelope.

    Subclasses only pin the status code, so handlers can keep raising them
    the same way they would raise a plain ``HTTPException``.
    """

    status_code = 500

    def __init__(self, message: str, fields: dict[str, str] | None = None) -> None:
        super().__init__(status_code=type(self).status_code, detail=message)
        self.message = message
        self.fields = fields


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class AuthorizationError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    # Duplicate unique values are reported as a client error.
    status_code = 400
