"""
FastAPI main application for the Book Records API.
"""

from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from books_api.config import config as api_config
from books_api.database import BookStore
from books_api.errors import (
    BookServiceError, ErrorKind, InvalidInputError, StoreUnavailableError, status_for
)
from books_api.models import BookPayload, BookResponse, ErrorResponse, MessageResponse
from utilities.config import config

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/books", tags=["Books"])


def get_book_store(request: Request) -> BookStore:
    """Return the store attached to the application at startup."""
    store = getattr(request.app.state, "book_store", None)
    if store is None:
        raise StoreUnavailableError()
    return store


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers
    )


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}
)
async def create_book(
    book: Optional[BookPayload] = None,
    store: BookStore = Depends(get_book_store)
):
    """
    Add a new book.

    Missing fields are stored as null. The stored record is returned with its generated id.
    """
    payload = (book or BookPayload()).model_dump()
    return await store.create_book(payload)


@router.get("", response_model=List[BookResponse])
async def list_books(store: BookStore = Depends(get_book_store)):
    """Get all books."""
    return await store.list_books()


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def get_book(book_id: str, store: BookStore = Depends(get_book_store)):
    """
    Get a single book by ID.

    - **book_id**: MongoDB ObjectId as a 24 character hex string
    """
    return await store.get_book(book_id)


@router.put(
    "/{book_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def update_book(
    book_id: str,
    book: Optional[BookPayload] = None,
    store: BookStore = Depends(get_book_store)
):
    """
    Replace the title, author and year of a book.

    All three fields are written; fields missing from the body become null.
    """
    payload = (book or BookPayload()).model_dump()
    await store.update_book(book_id, payload)
    return MessageResponse(message="Book updated successfully")


@router.delete(
    "/{book_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def delete_book(book_id: str, store: BookStore = Depends(get_book_store)):
    """Delete a book by ID."""
    await store.delete_book(book_id)
    return MessageResponse(message="Book deleted successfully")


def create_app(store: Optional[BookStore] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        store: Store to serve from. When omitted one is built from the
            service configuration at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Book Records API")

        book_store = store or BookStore.from_config(config)
        try:
            await book_store.connect()
        except BookServiceError:
            if store is None:
                book_store.close()
            raise
        app.state.book_store = book_store

        yield

        logger.info("Shutting down Book Records API")
        app.state.book_store = None
        if store is None:
            book_store.close()

    app = FastAPI(
        title=api_config.api_title,
        description=api_config.api_description,
        version=api_config.api_version,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_credentials=api_config.cors_allow_credentials,
        allow_methods=api_config.cors_allow_methods,
        allow_headers=api_config.cors_allow_headers,
    )

    @app.exception_handler(BookServiceError)
    async def book_service_exception_handler(request: Request, exc: BookServiceError):
        """Translate service errors through the error kind mapping."""
        if exc.kind in (ErrorKind.STORE_UNAVAILABLE, ErrorKind.UNKNOWN):
            logger.warning("Request failed", kind=exc.kind.value, path=request.url.path)
        return error_response(status_for(exc.kind), exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report malformed request bodies as invalid input."""
        logger.debug("Invalid request", path=request.url.path, errors=exc.errors())
        error = InvalidInputError("Invalid request body")
        return error_response(status_for(error.kind), error.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "books_api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.reload,
        log_level=config.log_level.lower()
    )
