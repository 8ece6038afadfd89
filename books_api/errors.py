"""
Error kinds for the book service and their HTTP translation.
"""

from enum import Enum
from typing import Optional

from bson.errors import InvalidDocument
from fastapi import status
from pymongo.errors import ConnectionFailure, DocumentTooLarge, WriteError


class ErrorKind(str, Enum):
    """Error kind enumeration."""
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    STORE_UNAVAILABLE = "store_unavailable"
    UNKNOWN = "unknown"


_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_DEFAULT_MESSAGES = {
    ErrorKind.NOT_FOUND: "Book not found",
    ErrorKind.INVALID_INPUT: "Invalid input",
    ErrorKind.STORE_UNAVAILABLE: "Book store unavailable",
    ErrorKind.UNKNOWN: "Internal server error",
}


class BookServiceError(Exception):
    """
    Base error for book operations.

    The message is safe to show to API clients. Driver details stay on
    ``__cause__`` and in the logs.
    """

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: Optional[str] = None):
        self.message = message or _DEFAULT_MESSAGES[self.kind]
        super().__init__(self.message)


class BookNotFoundError(BookServiceError):
    """No book matches the given identifier."""
    kind = ErrorKind.NOT_FOUND


class InvalidInputError(BookServiceError):
    """Malformed identifier or a document the store rejected."""
    kind = ErrorKind.INVALID_INPUT


class StoreUnavailableError(BookServiceError):
    """The store could not be reached."""
    kind = ErrorKind.STORE_UNAVAILABLE


class UnknownStoreError(BookServiceError):
    kind = ErrorKind.UNKNOWN


def status_for(kind: ErrorKind) -> int:
    """Map an error kind to its HTTP status code."""
    return _STATUS_BY_KIND[kind]


def classify_store_error(exc: Exception) -> BookServiceError:
    """
    Translate a driver exception into a service error.

    Args:
        exc: Exception raised by pymongo/motor or bson

    Returns:
        BookServiceError carrying a sanitized message
    """
    if isinstance(exc, ConnectionFailure):
        return StoreUnavailableError()
    if isinstance(exc, (WriteError, DocumentTooLarge, InvalidDocument)):
        return InvalidInputError("Invalid book data")
    return UnknownStoreError()
