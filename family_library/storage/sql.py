"""
Relational storage backend on SQLAlchemy.

Each public method runs in its own session and transaction, so every call is
atomic. ORM rows never leave this module: results are converted to the schema
models before the session closes.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session, sessionmaker

from family_library import models
from family_library.schemas import (
    Activity,
    ActivityCreate,
    Book,
    BookCreate,
    BookLending,
    BookLendingCreate,
    Bookshelf,
    BookshelfCreate,
    BookshelfUpdate,
    BookUpdate,
    Family,
    FamilyCreate,
    ReadingHistory,
    ReadingHistoryComplete,
    ReadingHistoryCreate,
    User,
    UserCreate,
    UserFamily,
    UserFamilyCreate,
)
from family_library.storage.base import Storage, utcnow


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlStorage(Storage):
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # Users

    def get_user(self, user_id: int) -> User | None:
        with self._session() as session:
            row = session.get(models.User, user_id)
            return User.model_validate(row) if row else None

    def get_user_by_username(self, username: str) -> User | None:
        with self._session() as session:
            row = session.scalars(
                select(models.User).where(func.lower(models.User.username) == username.lower())
            ).first()
            return User.model_validate(row) if row else None

    def create_user(self, user: UserCreate) -> User:
        with self._session() as session:
            row = models.User(is_online=False, **user.model_dump())
            session.add(row)
            session.flush()
            return User.model_validate(row)

    def get_all_users(self) -> list[User]:
        with self._session() as session:
            rows = session.scalars(select(models.User).order_by(models.User.id))
            return [User.model_validate(r) for r in rows]

    def update_user_online_status(self, user_id: int, is_online: bool) -> User | None:
        with self._session() as session:
            row = session.get(models.User, user_id)
            if not row:
                return None
            row.is_online = is_online
            session.flush()
            return User.model_validate(row)

    # Families

    def get_family(self, family_id: int) -> Family | None:
        with self._session() as session:
            row = session.get(models.Family, family_id)
            return Family.model_validate(row) if row else None

    def create_family(self, family: FamilyCreate) -> Family:
        with self._session() as session:
            row = models.Family(**family.model_dump())
            session.add(row)
            session.flush()
            return Family.model_validate(row)

    def get_all_families(self) -> list[Family]:
        with self._session() as session:
            rows = session.scalars(select(models.Family).order_by(models.Family.id))
            return [Family.model_validate(r) for r in rows]

    # Memberships

    def add_user_to_family(self, membership: UserFamilyCreate) -> UserFamily:
        with self._session() as session:
            row = session.scalars(
                select(models.UserFamily).where(
                    models.UserFamily.user_id == membership.user_id,
                    models.UserFamily.family_id == membership.family_id,
                )
            ).first()
            if not row:
                row = models.UserFamily(**membership.model_dump())
                session.add(row)
                session.flush()
            return UserFamily.model_validate(row)

    def get_users_by_family(self, family_id: int) -> list[User]:
        with self._session() as session:
            rows = session.scalars(
                select(models.User)
                .join(models.UserFamily, models.UserFamily.user_id == models.User.id)
                .where(models.UserFamily.family_id == family_id)
                .order_by(models.UserFamily.id)
            )
            return [User.model_validate(r) for r in rows]

    def get_families_by_user(self, user_id: int) -> list[Family]:
        with self._session() as session:
            rows = session.scalars(
                select(models.Family)
                .join(models.UserFamily, models.UserFamily.family_id == models.Family.id)
                .where(models.UserFamily.user_id == user_id)
                .order_by(models.UserFamily.id)
            )
            return [Family.model_validate(r) for r in rows]

    def remove_user_from_family(self, user_id: int, family_id: int) -> bool:
        with self._session() as session:
            result = session.execute(
                delete(models.UserFamily).where(
                    models.UserFamily.user_id == user_id,
                    models.UserFamily.family_id == family_id,
                )
            )
            return result.rowcount > 0

    # Bookshelves

    def get_bookshelf(self, bookshelf_id: int) -> Bookshelf | None:
        with self._session() as session:
            row = session.get(models.Bookshelf, bookshelf_id)
            return Bookshelf.model_validate(row) if row else None

    def create_bookshelf(self, bookshelf: BookshelfCreate) -> Bookshelf:
        with self._session() as session:
            row = models.Bookshelf(**bookshelf.model_dump())
            session.add(row)
            session.flush()
            return Bookshelf.model_validate(row)

    def get_all_bookshelves(self) -> list[Bookshelf]:
        with self._session() as session:
            rows = session.scalars(select(models.Bookshelf).order_by(models.Bookshelf.id))
            return [Bookshelf.model_validate(r) for r in rows]

    def get_bookshelves_by_user(self, user_id: int) -> list[Bookshelf]:
        with self._session() as session:
            rows = session.scalars(
                select(models.Bookshelf)
                .where(models.Bookshelf.user_id == user_id)
                .order_by(models.Bookshelf.id)
            )
            return [Bookshelf.model_validate(r) for r in rows]

    def get_bookshelves_by_family(
        self, family_id: int, include_private: bool = False
    ) -> list[Bookshelf]:
        with self._session() as session:
            q = select(models.Bookshelf).where(models.Bookshelf.family_id == family_id)
            if not include_private:
                q = q.where(~models.Bookshelf.is_private)
            rows = session.scalars(q.order_by(models.Bookshelf.id))
            return [Bookshelf.model_validate(r) for r in rows]

    def update_bookshelf(self, bookshelf_id: int, update: BookshelfUpdate) -> Bookshelf | None:
        with self._session() as session:
            row = session.get(models.Bookshelf, bookshelf_id)
            if not row:
                return None
            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            session.flush()
            return Bookshelf.model_validate(row)

    def delete_bookshelf(self, bookshelf_id: int) -> bool:
        with self._session() as session:
            row = session.get(models.Bookshelf, bookshelf_id)
            if not row:
                return False
            has_books = session.scalar(
                select(func.count(models.Book.id)).where(models.Book.bookshelf_id == bookshelf_id)
            )
            if has_books:
                return False
            session.delete(row)
            return True

    # Books

    def get_book(self, book_id: int) -> Book | None:
        with self._session() as session:
            row = session.get(models.Book, book_id)
            return Book.model_validate(row) if row else None

    def create_book(self, book: BookCreate) -> Book:
        with self._session() as session:
            row = models.Book(added_date=utcnow(), **book.model_dump())
            session.add(row)
            session.flush()
            return Book.model_validate(row)

    def update_book(self, book_id: int, update: BookUpdate) -> Book | None:
        with self._session() as session:
            row = session.get(models.Book, book_id)
            if not row:
                return None
            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            session.flush()
            return Book.model_validate(row)

    def get_all_books(self) -> list[Book]:
        with self._session() as session:
            rows = session.scalars(select(models.Book).order_by(models.Book.id))
            return [Book.model_validate(r) for r in rows]

    def get_books_by_bookshelf(self, bookshelf_id: int) -> list[Book]:
        with self._session() as session:
            rows = session.scalars(
                select(models.Book)
                .where(models.Book.bookshelf_id == bookshelf_id)
                .order_by(models.Book.id)
            )
            return [Book.model_validate(r) for r in rows]

    def search_books(self, query: str) -> list[Book]:
        pattern = "%" + _escape_like(query) + "%"
        with self._session() as session:
            rows = session.scalars(
                select(models.Book)
                .where(
                    or_(
                        models.Book.title.ilike(pattern, escape="\\"),
                        models.Book.author.ilike(pattern, escape="\\"),
                        models.Book.isbn.ilike(pattern, escape="\\"),
                        models.Book.category.ilike(pattern, escape="\\"),
                    )
                )
                .order_by(models.Book.id)
            )
            return [Book.model_validate(r) for r in rows]

    # Lendings

    def get_book_lending(self, lending_id: int) -> BookLending | None:
        with self._session() as session:
            row = session.get(models.BookLending, lending_id)
            return BookLending.model_validate(row) if row else None

    def create_book_lending(self, lending: BookLendingCreate) -> BookLending:
        with self._session() as session:
            row = models.BookLending(lend_date=utcnow(), return_date=None, **lending.model_dump())
            session.add(row)
            session.flush()
            return BookLending.model_validate(row)

    def get_all_book_lendings(self) -> list[BookLending]:
        return self._lendings_where()

    def get_book_lendings_by_lender(self, lender_id: int) -> list[BookLending]:
        return self._lendings_where(models.BookLending.lender_id == lender_id)

    def get_book_lendings_by_borrower(self, borrower_id: int) -> list[BookLending]:
        return self._lendings_where(models.BookLending.borrower_id == borrower_id)

    def get_book_lendings_by_book(self, book_id: int) -> list[BookLending]:
        return self._lendings_where(models.BookLending.book_id == book_id)

    def _lendings_where(self, *criteria) -> list[BookLending]:
        with self._session() as session:
            rows = session.scalars(
                select(models.BookLending).where(*criteria).order_by(models.BookLending.id)
            )
            return [BookLending.model_validate(r) for r in rows]

    def return_book(self, lending_id: int) -> BookLending | None:
        with self._session() as session:
            row = session.get(models.BookLending, lending_id)
            if not row:
                return None
            self._mark_returned(row)
            session.flush()
            return BookLending.model_validate(row)

    def return_book_and_release(self, lending_id: int) -> tuple[BookLending, Book | None] | None:
        with self._session() as session:
            lending_row = session.get(models.BookLending, lending_id)
            if not lending_row:
                return None

            book_row = session.get(models.Book, lending_row.book_id)
            if lending_row.status != "returned":
                self._mark_returned(lending_row)
                if book_row:
                    open_sessions = session.scalar(
                        select(func.count(models.ReadingHistory.id)).where(
                            models.ReadingHistory.book_id == book_row.id,
                            models.ReadingHistory.end_date.is_(None),
                        )
                    )
                    book_row.status = "reading" if open_sessions else "available"
                session.flush()

            book = Book.model_validate(book_row) if book_row else None
            return BookLending.model_validate(lending_row), book

    @staticmethod
    def _mark_returned(row: models.BookLending) -> None:
        if row.status != "returned":
            row.status = "returned"
            row.return_date = utcnow()

    # Reading history

    def get_reading_history(self, history_id: int) -> ReadingHistory | None:
        with self._session() as session:
            row = session.get(models.ReadingHistory, history_id)
            return ReadingHistory.model_validate(row) if row else None

    def create_reading_history(self, history: ReadingHistoryCreate) -> ReadingHistory:
        data = history.model_dump()
        if data["start_date"] is None:
            data["start_date"] = utcnow()

        with self._session() as session:
            row = models.ReadingHistory(**data)
            session.add(row)
            session.flush()
            return ReadingHistory.model_validate(row)

    def get_all_reading_history(self) -> list[ReadingHistory]:
        return self._history_where()

    def get_reading_history_by_user(self, user_id: int) -> list[ReadingHistory]:
        return self._history_where(models.ReadingHistory.user_id == user_id)

    def get_reading_history_by_book(self, book_id: int) -> list[ReadingHistory]:
        return self._history_where(models.ReadingHistory.book_id == book_id)

    def _history_where(self, *criteria) -> list[ReadingHistory]:
        with self._session() as session:
            rows = session.scalars(
                select(models.ReadingHistory).where(*criteria).order_by(models.ReadingHistory.id)
            )
            return [ReadingHistory.model_validate(r) for r in rows]

    def complete_reading_history(
        self, history_id: int, completion: ReadingHistoryComplete
    ) -> ReadingHistory | None:
        with self._session() as session:
            row = session.get(models.ReadingHistory, history_id)
            if not row:
                return None
            for field, value in completion.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            session.flush()
            return ReadingHistory.model_validate(row)

    # Activities

    def create_activity(self, activity: ActivityCreate) -> Activity:
        with self._session() as session:
            row = models.Activity(timestamp=utcnow(), **activity.model_dump())
            session.add(row)
            session.flush()
            return Activity.model_validate(row)

    def get_all_activities(self, limit: int | None = None) -> list[Activity]:
        return self._activities_where(limit=limit)

    def get_activities_by_user(self, user_id: int, limit: int | None = None) -> list[Activity]:
        return self._activities_where(
            or_(
                models.Activity.user_id == user_id,
                models.Activity.related_user_id == user_id,
            ),
            limit=limit,
        )

    def get_activities_by_family(self, family_id: int, limit: int | None = None) -> list[Activity]:
        members = select(models.UserFamily.user_id).where(models.UserFamily.family_id == family_id)
        return self._activities_where(
            or_(
                models.Activity.user_id.in_(members),
                models.Activity.related_user_id.in_(members),
            ),
            limit=limit,
        )

    def _activities_where(self, *criteria, limit: int | None = None) -> list[Activity]:
        with self._session() as session:
            q = (
                select(models.Activity)
                .where(*criteria)
                .order_by(models.Activity.timestamp.desc(), models.Activity.id.desc())
            )
            if limit:
                q = q.limit(limit)
            return [Activity.model_validate(r) for r in session.scalars(q)]
