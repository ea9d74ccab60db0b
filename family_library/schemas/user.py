from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    username: str = Field(..., min_length=2, max_length=50, pattern=r"^[a-zA-Z0-9_.-]+$")
    password: str = Field(..., min_length=8)
    display_name: str = Field(..., min_length=1, max_length=100)
    avatar: str | None = Field(None, max_length=2048)  # image URI


class User(BaseModel):
    """Persisted user. ``password`` holds the stored hash, never plain text."""

    id: int
    username: str
    password: str
    display_name: str
    avatar: str | None = None
    is_online: bool = False

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: int
    username: str
    display_name: str
    avatar: str | None
    is_online: bool

    class Config:
        from_attributes = True


class OnlineStatusUpdate(BaseModel):
    is_online: bool
