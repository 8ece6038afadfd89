"""
Pytest configuration and shared fixtures.
"""

import copy
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from books_api.database import BookStore
from books_api.main import create_app


class InMemoryCursor:
    """Cursor over a snapshot of stored documents."""

    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        if length is None:
            return list(self._documents)
        return list(self._documents[:length])


class InMemoryCollection:
    """
    Stand-in for a Motor collection holding documents in a dict.
    Supports only the ``_id`` filters issued by BookStore.
    """

    name = "allBooks"

    def __init__(self):
        self.documents = {}
        self.database = SimpleNamespace(name="bookStore", command=AsyncMock(return_value={"ok": 1}))

    async def insert_one(self, document):
        document = copy.deepcopy(document)
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = document
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, query):
        document = self.documents.get(query["_id"])
        return copy.deepcopy(document) if document is not None else None

    def find(self, query=None):
        return InMemoryCursor([copy.deepcopy(doc) for doc in self.documents.values()])

    async def update_one(self, query, update):
        document = self.documents.get(query["_id"])
        if document is None:
            return SimpleNamespace(matched_count=0, modified_count=0)
        document.update(copy.deepcopy(update["$set"]))
        return SimpleNamespace(matched_count=1, modified_count=1)

    async def delete_one(self, query):
        removed = self.documents.pop(query["_id"], None)
        return SimpleNamespace(deleted_count=0 if removed is None else 1)


@pytest.fixture
def in_memory_collection():
    """Create an empty in-memory books collection."""
    return InMemoryCollection()


@pytest.fixture
def book_store(in_memory_collection):
    """Create a BookStore backed by the in-memory collection."""
    return BookStore(in_memory_collection)


@pytest.fixture
def client(book_store):
    """Create a test client serving from the in-memory store, with lifespan running."""
    with TestClient(create_app(store=book_store)) as test_client:
        yield test_client


@pytest.fixture
def mock_collection():
    """Create a mock Motor collection."""
    collection = MagicMock()
    collection.name = "allBooks"
    collection.database.name = "bookStore"
    collection.database.command = AsyncMock(return_value={"ok": 1})
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    return collection


@pytest.fixture
def sample_book_data():
    """Create sample book data for testing."""
    return {"title": "1984", "author": "Orwell", "year": 1949}
