from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from family_library.core.database import Base


class Activity(Base):
    """Append-only feed entry."""

    __tablename__ = "activities"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)  # actor
    activity_type: Mapped[str] = mapped_column(String(20), index=True)  # read, borrow, return, add, rate
    book_id: Mapped[int | None] = mapped_column(ForeignKey("books.id"), index=True)
    related_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    data: Mapped[dict | None] = mapped_column(JSON)
