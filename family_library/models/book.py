from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_library.core.database import Base


class Bookshelf(Base):
    """A named container of books, private to its owner or shared with the family."""

    __tablename__ = "bookshelves"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    family_id: Mapped[int] = mapped_column(ForeignKey("families.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)  # owner
    num_shelves: Mapped[int] = mapped_column(Integer, default=3)  # physical rows
    is_private: Mapped[bool] = mapped_column(Boolean, default=False)

    # Books keep their bookshelf_id; the ORM never nulls it on delete
    books: Mapped[list["Book"]] = relationship(back_populates="bookshelf", passive_deletes="all")


class Book(Base):
    __tablename__ = "books"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)

    # Catalogue data
    title: Mapped[str] = mapped_column(String(500), index=True)
    author: Mapped[str] = mapped_column(String(255), index=True)
    isbn: Mapped[str | None] = mapped_column(String(20), index=True)
    category: Mapped[str | None] = mapped_column(String(100), index=True)
    cover_image: Mapped[str | None] = mapped_column(String(2048))
    description: Mapped[str | None] = mapped_column(Text)

    # Placement
    added_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    bookshelf_id: Mapped[int] = mapped_column(ForeignKey("bookshelves.id"), index=True)
    shelf_position: Mapped[dict] = mapped_column(JSON)  # {"shelf": int, "position": int}

    status: Mapped[str] = mapped_column(String(20), default="available")  # available, borrowed, reading
    added_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    bookshelf: Mapped["Bookshelf"] = relationship(back_populates="books")
