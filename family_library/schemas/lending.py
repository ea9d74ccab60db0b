from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from family_library.schemas.common import LendingStatus, naive_utc


class BookLendingCreate(BaseModel):
    book_id: int = Field(..., ge=1)
    lender_id: int = Field(..., ge=1)
    borrower_id: int = Field(..., ge=1)
    due_date: datetime | None = None
    # Every loan starts out borrowed; "returned" is reached only by returning the
    # book. "overdue" is a stored value that no code path sets.
    status: Literal["borrowed"] = "borrowed"

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v):
        return naive_utc(v)

    @model_validator(mode="after")
    def check_parties(self):
        if self.lender_id == self.borrower_id:
            raise ValueError("lender and borrower must be different users")
        return self


class BookLending(BaseModel):
    id: int
    book_id: int
    lender_id: int
    borrower_id: int
    lend_date: datetime
    due_date: datetime | None = None
    return_date: datetime | None = None  # set iff status == "returned"
    status: LendingStatus

    class Config:
        from_attributes = True
