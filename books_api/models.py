"""
API models and schemas for the book records service.

Book fields are stored and returned exactly as submitted; their types are not checked.
"""

from typing import Any

from pydantic import BaseModel, Field


class BookPayload(BaseModel):
    """Request body for creating or replacing a book."""
    title: Any = Field(None, description="Book title")
    author: Any = Field(None, description="Book author")
    year: Any = Field(None, description="Publication year")


class BookResponse(BaseModel):
    """Book response model for API."""
    id: str = Field(..., description="Unique book identifier")
    title: Any = Field(None, description="Book title")
    author: Any = Field(None, description="Book author")
    year: Any = Field(None, description="Publication year")


class MessageResponse(BaseModel):
    """Confirmation message response model."""
    message: str = Field(..., description="Confirmation message")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
