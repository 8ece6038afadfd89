"""
Tests for error kinds, status mapping and driver error classification.
"""

import pytest
from bson.errors import InvalidDocument
from pymongo.errors import (
    AutoReconnect, ConnectionFailure, DocumentTooLarge, DuplicateKeyError,
    NetworkTimeout, OperationFailure, ServerSelectionTimeoutError, WriteError
)

from books_api.errors import (
    BookNotFoundError, ErrorKind, InvalidInputError, StoreUnavailableError,
    UnknownStoreError, classify_store_error, status_for
)


@pytest.mark.parametrize("kind,expected", [
    (ErrorKind.NOT_FOUND, 404),
    (ErrorKind.INVALID_INPUT, 400),
    (ErrorKind.STORE_UNAVAILABLE, 503),
    (ErrorKind.UNKNOWN, 500),
])
def test_status_for(kind, expected):
    """Test the error kind to status mapping."""
    assert status_for(kind) == expected


def test_every_kind_has_status():
    """Test that no error kind is left unmapped."""
    for kind in ErrorKind:
        assert isinstance(status_for(kind), int)


def test_default_messages():
    """Test the client-facing default messages."""
    assert BookNotFoundError().message == "Book not found"
    assert StoreUnavailableError().message == "Book store unavailable"
    assert UnknownStoreError().message == "Internal server error"
    assert InvalidInputError("Invalid book id").message == "Invalid book id"


@pytest.mark.parametrize("exc", [
    ConnectionFailure("refused"),
    AutoReconnect("reset"),
    NetworkTimeout("timed out"),
    ServerSelectionTimeoutError("no servers"),
])
def test_classify_connection_errors(exc):
    """Test that connectivity failures are classified as store unavailable."""
    error = classify_store_error(exc)
    assert error.kind == ErrorKind.STORE_UNAVAILABLE


@pytest.mark.parametrize("exc", [
    WriteError("document failed validation", code=121),
    DuplicateKeyError("E11000 duplicate key error"),
    DocumentTooLarge("too large"),
    InvalidDocument("cannot encode object"),
])
def test_classify_rejected_documents(exc):
    """Test that rejected documents are classified as invalid input."""
    error = classify_store_error(exc)
    assert error.kind == ErrorKind.INVALID_INPUT
    assert error.message == "Invalid book data"


@pytest.mark.parametrize("exc", [
    OperationFailure("not authorized", code=13),
    RuntimeError("boom"),
])
def test_classify_unknown_errors(exc):
    """Test that other failures are unknown and do not leak their message."""
    error = classify_store_error(exc)
    assert error.kind == ErrorKind.UNKNOWN
    assert str(exc) not in error.message
