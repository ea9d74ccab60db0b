from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from family_library.schemas.common import BookStatus, ShelfPosition


class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=255)
    isbn: str | None = Field(None, max_length=20)
    category: str | None = Field(None, max_length=100)
    cover_image: str | None = Field(None, max_length=2048)
    description: str | None = None
    added_by_id: int = Field(..., ge=1)
    bookshelf_id: int = Field(..., ge=1)
    shelf_position: ShelfPosition
    status: BookStatus = "available"


class BookUpdate(BaseModel):
    """Any subset of BookCreate; fields left out are not touched."""

    title: str | None = Field(None, min_length=1, max_length=500)
    author: str | None = Field(None, min_length=1, max_length=255)
    isbn: str | None = Field(None, max_length=20)
    category: str | None = Field(None, max_length=100)
    cover_image: str | None = Field(None, max_length=2048)
    description: str | None = None
    added_by_id: int | None = Field(None, ge=1)
    bookshelf_id: int | None = Field(None, ge=1)
    shelf_position: ShelfPosition | None = None
    status: BookStatus | None = None

    @field_validator("title", "author", "added_by_id", "bookshelf_id", "shelf_position", "status")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class Book(BaseModel):
    id: int
    title: str
    author: str
    isbn: str | None = None
    category: str | None = None
    cover_image: str | None = None
    description: str | None = None
    added_by_id: int
    bookshelf_id: int
    shelf_position: ShelfPosition
    status: BookStatus
    added_date: datetime

    class Config:
        from_attributes = True
