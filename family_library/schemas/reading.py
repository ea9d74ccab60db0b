from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from family_library.schemas.common import naive_utc


class ReadingHistoryCreate(BaseModel):
    user_id: int = Field(..., ge=1)
    book_id: int = Field(..., ge=1)
    start_date: datetime | None = None  # defaults to now when stored
    end_date: datetime | None = None  # None means "currently reading"
    rating: int | None = Field(None, ge=1, le=5)
    notes: str | None = Field(None, max_length=5000)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return naive_utc(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ReadingHistoryComplete(BaseModel):
    end_date: datetime | None = None  # defaults to now
    rating: int | None = Field(None, ge=1, le=5)
    notes: str | None = Field(None, max_length=5000)

    @field_validator("end_date")
    @classmethod
    def normalize_end_date(cls, v):
        return naive_utc(v)


class ReadingHistory(BaseModel):
    id: int
    user_id: int
    book_id: int
    start_date: datetime
    end_date: datetime | None = None
    rating: int | None = None
    notes: str | None = None

    class Config:
        from_attributes = True
