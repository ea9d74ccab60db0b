"""
In-memory storage backend.

Records live in plain dicts keyed by id, one dict and one id counter per
entity type. Queries are linear scans. Records are copied on the way in and
on the way out so callers can never mutate stored state by accident.
"""

import itertools
import threading
from typing import Iterator, TypeVar

from pydantic import BaseModel

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
from family_library.storage.base import Storage, newest_first, utcnow

RecordT = TypeVar("RecordT", bound=BaseModel)


def _copy(record: RecordT) -> RecordT:
    return record.model_copy(deep=True)


class MemStorage(Storage):
    def __init__(self):
        # Guards every map against callers on other threads. Re-entrant:
        # family activity lookups call get_users_by_family
        self._lock = threading.RLock()

        self._users: dict[int, User] = {}
        self._families: dict[int, Family] = {}
        self._user_families: dict[int, UserFamily] = {}
        self._bookshelves: dict[int, Bookshelf] = {}
        self._books: dict[int, Book] = {}
        self._book_lendings: dict[int, BookLending] = {}
        self._reading_history: dict[int, ReadingHistory] = {}
        self._activities: dict[int, Activity] = {}

        self._ids: dict[str, Iterator[int]] = {
            name: itertools.count(1)
            for name in (
                "users",
                "families",
                "user_families",
                "bookshelves",
                "books",
                "book_lendings",
                "reading_history",
                "activities",
            )
        }

    def _next_id(self, name: str) -> int:
        return next(self._ids[name])

    # Users

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            return _copy(user) if user else None

    def get_user_by_username(self, username: str) -> User | None:
        wanted = username.lower()
        with self._lock:
            for user in self._users.values():
                if user.username.lower() == wanted:
                    return _copy(user)
        return None

    def create_user(self, user: UserCreate) -> User:
        with self._lock:
            record = User(id=self._next_id("users"), is_online=False, **user.model_dump())
            self._users[record.id] = record
            return _copy(record)

    def get_all_users(self) -> list[User]:
        with self._lock:
            return [_copy(u) for u in self._users.values()]

    def update_user_online_status(self, user_id: int, is_online: bool) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            updated = user.model_copy(update={"is_online": is_online})
            self._users[user_id] = updated
            return _copy(updated)

    # Families

    def get_family(self, family_id: int) -> Family | None:
        with self._lock:
            family = self._families.get(family_id)
            return _copy(family) if family else None

    def create_family(self, family: FamilyCreate) -> Family:
        with self._lock:
            record = Family(id=self._next_id("families"), **family.model_dump())
            self._families[record.id] = record
            return _copy(record)

    def get_all_families(self) -> list[Family]:
        with self._lock:
            return [_copy(f) for f in self._families.values()]

    # Memberships

    def add_user_to_family(self, membership: UserFamilyCreate) -> UserFamily:
        with self._lock:
            for existing in self._user_families.values():
                if (
                    existing.user_id == membership.user_id
                    and existing.family_id == membership.family_id
                ):
                    return _copy(existing)

            record = UserFamily(id=self._next_id("user_families"), **membership.model_dump())
            self._user_families[record.id] = record
            return _copy(record)

    def get_users_by_family(self, family_id: int) -> list[User]:
        with self._lock:
            users = []
            for membership in self._user_families.values():
                if membership.family_id != family_id:
                    continue
                user = self._users.get(membership.user_id)
                if user:
                    users.append(_copy(user))
            return users

    def get_families_by_user(self, user_id: int) -> list[Family]:
        with self._lock:
            families = []
            for membership in self._user_families.values():
                if membership.user_id != user_id:
                    continue
                family = self._families.get(membership.family_id)
                if family:
                    families.append(_copy(family))
            return families

    def remove_user_from_family(self, user_id: int, family_id: int) -> bool:
        with self._lock:
            for membership_id, membership in list(self._user_families.items()):
                if membership.user_id == user_id and membership.family_id == family_id:
                    del self._user_families[membership_id]
                    return True
        return False

    # Bookshelves

    def get_bookshelf(self, bookshelf_id: int) -> Bookshelf | None:
        with self._lock:
            bookshelf = self._bookshelves.get(bookshelf_id)
            return _copy(bookshelf) if bookshelf else None

    def create_bookshelf(self, bookshelf: BookshelfCreate) -> Bookshelf:
        with self._lock:
            record = Bookshelf(id=self._next_id("bookshelves"), **bookshelf.model_dump())
            self._bookshelves[record.id] = record
            return _copy(record)

    def get_all_bookshelves(self) -> list[Bookshelf]:
        with self._lock:
            return [_copy(b) for b in self._bookshelves.values()]

    def get_bookshelves_by_user(self, user_id: int) -> list[Bookshelf]:
        with self._lock:
            return [_copy(b) for b in self._bookshelves.values() if b.user_id == user_id]

    def get_bookshelves_by_family(
        self, family_id: int, include_private: bool = False
    ) -> list[Bookshelf]:
        with self._lock:
            return [
                _copy(b)
                for b in self._bookshelves.values()
                if b.family_id == family_id and (include_private or not b.is_private)
            ]

    def update_bookshelf(self, bookshelf_id: int, update: BookshelfUpdate) -> Bookshelf | None:
        with self._lock:
            bookshelf = self._bookshelves.get(bookshelf_id)
            if not bookshelf:
                return None
            updated = bookshelf.model_copy(update=update.model_dump(exclude_unset=True))
            self._bookshelves[bookshelf_id] = updated
            return _copy(updated)

    def delete_bookshelf(self, bookshelf_id: int) -> bool:
        with self._lock:
            if bookshelf_id not in self._bookshelves:
                return False
            if any(b.bookshelf_id == bookshelf_id for b in self._books.values()):
                return False
            del self._bookshelves[bookshelf_id]
            return True

    # Books

    def get_book(self, book_id: int) -> Book | None:
        with self._lock:
            book = self._books.get(book_id)
            return _copy(book) if book else None

    def create_book(self, book: BookCreate) -> Book:
        with self._lock:
            record = Book(id=self._next_id("books"), added_date=utcnow(), **book.model_dump())
            self._books[record.id] = record
            return _copy(record)

    def update_book(self, book_id: int, update: BookUpdate) -> Book | None:
        with self._lock:
            book = self._books.get(book_id)
            if not book:
                return None
            # Re-validate so a nested shelf_position dict becomes a ShelfPosition again
            updated = Book.model_validate(
                {**book.model_dump(), **update.model_dump(exclude_unset=True)}
            )
            self._books[book_id] = updated
            return _copy(updated)

    def get_all_books(self) -> list[Book]:
        with self._lock:
            return [_copy(b) for b in self._books.values()]

    def get_books_by_bookshelf(self, bookshelf_id: int) -> list[Book]:
        with self._lock:
            return [_copy(b) for b in self._books.values() if b.bookshelf_id == bookshelf_id]

    def search_books(self, query: str) -> list[Book]:
        term = query.lower()

        def matches(book: Book) -> bool:
            return (
                term in book.title.lower()
                or term in book.author.lower()
                or (book.isbn is not None and term in book.isbn.lower())
                or (book.category is not None and term in book.category.lower())
            )

        with self._lock:
            return [_copy(b) for b in self._books.values() if matches(b)]

    # Lendings

    def get_book_lending(self, lending_id: int) -> BookLending | None:
        with self._lock:
            lending = self._book_lendings.get(lending_id)
            return _copy(lending) if lending else None

    def create_book_lending(self, lending: BookLendingCreate) -> BookLending:
        with self._lock:
            record = BookLending(
                id=self._next_id("book_lendings"),
                lend_date=utcnow(),
                return_date=None,
                **lending.model_dump(),
            )
            self._book_lendings[record.id] = record
            return _copy(record)

    def get_all_book_lendings(self) -> list[BookLending]:
        with self._lock:
            return [_copy(lending) for lending in self._book_lendings.values()]

    def get_book_lendings_by_lender(self, lender_id: int) -> list[BookLending]:
        return self._lendings_where(lambda lending: lending.lender_id == lender_id)

    def get_book_lendings_by_borrower(self, borrower_id: int) -> list[BookLending]:
        return self._lendings_where(lambda lending: lending.borrower_id == borrower_id)

    def get_book_lendings_by_book(self, book_id: int) -> list[BookLending]:
        return self._lendings_where(lambda lending: lending.book_id == book_id)

    def _lendings_where(self, predicate) -> list[BookLending]:
        with self._lock:
            return [_copy(x) for x in self._book_lendings.values() if predicate(x)]

    def return_book(self, lending_id: int) -> BookLending | None:
        with self._lock:
            lending = self._book_lendings.get(lending_id)
            if not lending:
                return None
            if lending.status != "returned":
                lending = lending.model_copy(
                    update={"status": "returned", "return_date": utcnow()}
                )
                self._book_lendings[lending_id] = lending
            return _copy(lending)

    def return_book_and_release(self, lending_id: int) -> tuple[BookLending, Book | None] | None:
        with self._lock:
            existing = self._book_lendings.get(lending_id)
            if not existing:
                return None
            if existing.status == "returned":
                return self.return_book(lending_id), self.get_book(existing.book_id)

            lending = self.return_book(lending_id)
            book = self._books.get(lending.book_id)
            if book:
                still_reading = any(
                    h.book_id == book.id and h.end_date is None
                    for h in self._reading_history.values()
                )
                book = book.model_copy(
                    update={"status": "reading" if still_reading else "available"}
                )
                self._books[book.id] = book
                book = _copy(book)
            return lending, book

    # Reading history

    def get_reading_history(self, history_id: int) -> ReadingHistory | None:
        with self._lock:
            history = self._reading_history.get(history_id)
            return _copy(history) if history else None

    def create_reading_history(self, history: ReadingHistoryCreate) -> ReadingHistory:
        data = history.model_dump()
        if data["start_date"] is None:
            data["start_date"] = utcnow()

        with self._lock:
            record = ReadingHistory(id=self._next_id("reading_history"), **data)
            self._reading_history[record.id] = record
            return _copy(record)

    def get_all_reading_history(self) -> list[ReadingHistory]:
        with self._lock:
            return [_copy(h) for h in self._reading_history.values()]

    def get_reading_history_by_user(self, user_id: int) -> list[ReadingHistory]:
        with self._lock:
            return [_copy(h) for h in self._reading_history.values() if h.user_id == user_id]

    def get_reading_history_by_book(self, book_id: int) -> list[ReadingHistory]:
        with self._lock:
            return [_copy(h) for h in self._reading_history.values() if h.book_id == book_id]

    def complete_reading_history(
        self, history_id: int, completion: ReadingHistoryComplete
    ) -> ReadingHistory | None:
        with self._lock:
            history = self._reading_history.get(history_id)
            if not history:
                return None
            updated = history.model_copy(update=completion.model_dump(exclude_unset=True))
            self._reading_history[history_id] = updated
            return _copy(updated)

    # Activities

    def create_activity(self, activity: ActivityCreate) -> Activity:
        with self._lock:
            record = Activity(
                id=self._next_id("activities"),
                timestamp=utcnow(),
                **activity.model_dump(),
            )
            self._activities[record.id] = record
            return _copy(record)

    def get_all_activities(self, limit: int | None = None) -> list[Activity]:
        with self._lock:
            return [_copy(a) for a in newest_first(self._activities.values(), limit)]

    def get_activities_by_user(self, user_id: int, limit: int | None = None) -> list[Activity]:
        with self._lock:
            matching = (
                a
                for a in self._activities.values()
                if a.user_id == user_id or a.related_user_id == user_id
            )
            return [_copy(a) for a in newest_first(matching, limit)]

    def get_activities_by_family(self, family_id: int, limit: int | None = None) -> list[Activity]:
        with self._lock:
            member_ids = {user.id for user in self.get_users_by_family(family_id)}
            matching = (
                a
                for a in self._activities.values()
                if a.user_id in member_ids or a.related_user_id in member_ids
            )
            return [_copy(a) for a in newest_first(matching, limit)]
