from pydantic import BaseModel, Field, field_validator

MAX_SHELVES = 50


class BookshelfCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    family_id: int = Field(..., ge=1)
    user_id: int = Field(..., ge=1)  # owner
    num_shelves: int = Field(3, ge=1, le=MAX_SHELVES)
    is_private: bool = False


class BookshelfUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    num_shelves: int | None = Field(None, ge=1, le=MAX_SHELVES)
    is_private: bool | None = None

    @field_validator("name", "num_shelves", "is_private")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class Bookshelf(BaseModel):
    id: int
    name: str
    family_id: int
    user_id: int
    num_shelves: int
    is_private: bool = False

    class Config:
        from_attributes = True
