from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_CODE = "invalid_code"
    INVALID_DATA = "invalid_data"
    CONFLICT = "conflict"


class CountryError(Exception):
    """Base for domain failures; `kind` and `status_code` drive the HTTP mapping."""

    kind: ErrorKind
    status_code: int = 500
    default_message = "country error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class CountryNotFound(CountryError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "country not found"


class InvalidCountryCode(CountryError):
    kind = ErrorKind.INVALID_CODE
    status_code = 400
    default_message = "invalid country code"


class InvalidCountryData(CountryError):
    kind = ErrorKind.INVALID_DATA
    status_code = 400
    default_message = "invalid country data"


class CountryConflict(CountryError):
    kind = ErrorKind.CONFLICT
    status_code = 409
    default_message = "country with the same code already exists"
