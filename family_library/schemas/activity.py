from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from family_library.schemas.common import ActivityType

# Activity types that describe an exchange between two users
_TWO_PARTY_TYPES = {"borrow", "return"}


class ActivityCreate(BaseModel):
    user_id: int = Field(..., ge=1)  # actor
    activity_type: ActivityType
    book_id: int | None = Field(None, ge=1)
    related_user_id: int | None = Field(None, ge=1)  # counterparty
    data: dict[str, Any] | None = None

    @model_validator(mode="after")
    def check_shape_for_type(self):
        if self.book_id is None:
            raise ValueError(f"'{self.activity_type}' activities need a book_id")

        if self.activity_type in _TWO_PARTY_TYPES:
            if self.related_user_id is None:
                raise ValueError(f"'{self.activity_type}' activities need a related_user_id")
            if self.related_user_id == self.user_id:
                raise ValueError("related_user_id must differ from user_id")

        if self.activity_type == "rate":
            rating = (self.data or {}).get("rating")
            # bool is an int subclass, "true" is not a rating
            if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
                raise ValueError("'rate' activities need data.rating between 1 and 5")

        return self


class Activity(BaseModel):
    """Feed entry. Append-only once stored."""

    id: int
    user_id: int
    activity_type: ActivityType
    book_id: int | None = None
    related_user_id: int | None = None
    timestamp: datetime
    data: dict[str, Any] | None = None

    class Config:
        from_attributes = True
