from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

BookStatus = Literal["available", "borrowed", "reading"]
LendingStatus = Literal["borrowed", "returned", "overdue"]
ActivityType = Literal["read", "borrow", "return", "add", "rate"]


class ShelfPosition(BaseModel):
    """Row / slot coordinate of a book inside its bookshelf."""

    shelf: int = Field(..., ge=0)  # 0-based row, must be < bookshelf.num_shelves
    position: int = Field(..., ge=0)  # 0-based slot within the row


def naive_utc(value: datetime | None) -> datetime | None:
    """Timestamps are stored as naive UTC, the same as datetime.utcnow()."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
