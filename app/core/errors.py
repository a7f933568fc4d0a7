# app/core/errors.py
"""
Domain errors raised by services and repositories.

Services never raise HTTPException for business rules; the exception
handlers registered in `app.main` translate these into HTTP responses:

    NotFoundError         -> 404
    UnavailableError      -> 409
    InvalidArgumentError  -> 422
    StorageError          -> 503
"""

from fastapi import status


class DomainError(Exception):
    """
    Base class for all recoverable, caller-facing errors.
    """

    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Cart, cart item, pet or user does not exist."""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class UnavailableError(DomainError):
    """Pet exists but cannot be purchased (sold)."""

    code = "unavailable"
    status_code = status.HTTP_409_CONFLICT


class InvalidArgumentError(DomainError):
    """Malformed quantity, id or upload."""

    code = "invalid_argument"
    status_code = 422


class StorageError(DomainError):
    """
    Persistence failed. Distinct from the domain kinds above and
    never retried by the services.
    """

    code = "storage_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
