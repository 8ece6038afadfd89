"""
Database service layer for the book records API.
Wraps a single MongoDB collection and classifies driver failures.
"""

from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from bson.errors import InvalidDocument, InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from books_api.errors import (
    BookNotFoundError, BookServiceError, InvalidInputError,
    StoreUnavailableError, classify_store_error
)
from utilities.config import ServiceConfig

logger = structlog.get_logger(__name__)

STORE_ERRORS = (PyMongoError, InvalidDocument)


def parse_book_id(book_id: str) -> ObjectId:
    """
    Convert a path identifier into a MongoDB ObjectId.

    Raises:
        InvalidInputError: if the identifier is not a valid ObjectId
    """
    try:
        return ObjectId(book_id)
    except (InvalidId, TypeError) as e:
        logger.debug("Rejected malformed book id", book_id=book_id, error=str(e))
        raise InvalidInputError("Invalid book id") from e


def document_to_record(book_doc: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored document into an API record with a string ``id``."""
    record = dict(book_doc)
    record["id"] = str(record.pop("_id"))
    return record


class BookStore:
    """
    Async store for book records.
    Each operation issues a single call against the books collection.
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        client: Optional[AsyncIOMotorClient] = None,
        require_connection: bool = False
    ):
        """
        Initialize the book store.

        Args:
            collection: Collection holding the book documents
            client: Client owning the collection, closed by ``close()``
            require_connection: Raise from ``connect()`` when the ping fails
        """
        self.collection = collection
        self.client = client
        self.require_connection = require_connection

    @classmethod
    def from_config(cls, config: ServiceConfig) -> "BookStore":
        """Build a store and its client from service configuration."""
        client = AsyncIOMotorClient(
            config.mongodb_url,
            serverSelectionTimeoutMS=config.mongodb_server_selection_timeout_ms
        )
        collection = client[config.mongodb_database][config.mongodb_collection]
        return cls(collection, client=client, require_connection=config.mongodb_require_connection)

    async def connect(self) -> bool:
        """
        Check that MongoDB is reachable.

        Returns:
            True if the server answered the ping
        """
        try:
            await self.collection.database.command("ping")
        except PyMongoError as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            if self.require_connection:
                raise StoreUnavailableError() from e
            return False

        logger.info(
            "Successfully connected to MongoDB",
            database=self.collection.database.name,
            collection=self.collection.name
        )
        return True

    def close(self) -> None:
        """Close the MongoDB client."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def _store_error(self, operation: str, exc: Exception, **context) -> BookServiceError:
        error = classify_store_error(exc)
        logger.error(
            "Book store operation failed",
            operation=operation,
            kind=error.kind.value,
            error=str(exc),
            error_type=type(exc).__name__,
            **context
        )
        return error

    async def create_book(self, book: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new book and return it as stored.

        Args:
            book: Field values for the new book

        Returns:
            The stored record including its generated ``id``
        """
        try:
            result = await self.collection.insert_one(dict(book))
            book_doc = await self.collection.find_one({"_id": result.inserted_id})
        except STORE_ERRORS as e:
            raise self._store_error("create_book", e) from e

        if book_doc is None:
            # Removed by a concurrent delete between insert and read back
            raise BookNotFoundError()

        logger.info("Book created", book_id=str(result.inserted_id))
        return document_to_record(book_doc)

    async def list_books(self) -> List[Dict[str, Any]]:
        """Return every book in natural order."""
        try:
            books_docs = await self.collection.find().to_list(length=None)
        except STORE_ERRORS as e:
            raise self._store_error("list_books", e) from e

        return [document_to_record(book_doc) for book_doc in books_docs]

    async def get_book(self, book_id: str) -> Dict[str, Any]:
        """
        Get a single book by ID.

        Raises:
            InvalidInputError: malformed identifier
            BookNotFoundError: no book has this identifier
        """
        object_id = parse_book_id(book_id)
        try:
            book_doc = await self.collection.find_one({"_id": object_id})
        except STORE_ERRORS as e:
            raise self._store_error("get_book", e, book_id=book_id) from e

        if book_doc is None:
            raise BookNotFoundError()
        return document_to_record(book_doc)

    async def update_book(self, book_id: str, book: Dict[str, Any]) -> None:
        """
        Overwrite the fields of an existing book.

        Every key in ``book`` is set, including ``None`` values.

        Raises:
            InvalidInputError: malformed identifier or rejected data
            BookNotFoundError: no book has this identifier
        """
        object_id = parse_book_id(book_id)
        try:
            result = await self.collection.update_one({"_id": object_id}, {"$set": dict(book)})
        except STORE_ERRORS as e:
            raise self._store_error("update_book", e, book_id=book_id) from e

        if result.matched_count == 0:
            raise BookNotFoundError()
        logger.info("Book updated", book_id=book_id)

    async def delete_book(self, book_id: str) -> None:
        """
        Delete a book by ID.

        Raises:
            InvalidInputError: malformed identifier
            BookNotFoundError: no book has this identifier
        """
        object_id = parse_book_id(book_id)
        try:
            result = await self.collection.delete_one({"_id": object_id})
        except STORE_ERRORS as e:
            raise self._store_error("delete_book", e, book_id=book_id) from e

        if result.deleted_count == 0:
            raise BookNotFoundError()
        logger.info("Book deleted", book_id=book_id)
