"""
Storage contract.

Every backend implements the same capability-oriented interface so callers can
swap the in-memory store for a relational one without changes. The contract:

- ``create_*`` assigns the next id for that entity type (ids are never reused),
  applies server-side defaults and returns the full stored record.
- ``get_*`` returns None when nothing has that id. Missing records are a normal
  outcome, never an exception.
- List queries return an empty list when nothing matches. Unless a method says
  otherwise the order is unspecified.
- ``update_*`` merges only the fields that were explicitly set on the update
  model and returns None for an unknown id.
- The store never validates input (that is the schema layer's job) and never
  cascades writes to other entities, except in ``return_book_and_release``
  which exists precisely to do so atomically.
- Each public method is atomic with respect to the collections it touches.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable

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


class Storage(ABC):
    """Abstract repository for every family library entity."""

    # Users

    @abstractmethod
    def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> User | None:
        """Case-insensitive username lookup."""

    @abstractmethod
    def create_user(self, user: UserCreate) -> User:
        """Store a user. ``is_online`` starts out False."""

    @abstractmethod
    def get_all_users(self) -> list[User]: ...

    @abstractmethod
    def update_user_online_status(self, user_id: int, is_online: bool) -> User | None: ...

    # Families

    @abstractmethod
    def get_family(self, family_id: int) -> Family | None: ...

    @abstractmethod
    def create_family(self, family: FamilyCreate) -> Family: ...

    @abstractmethod
    def get_all_families(self) -> list[Family]: ...

    # Memberships

    @abstractmethod
    def add_user_to_family(self, membership: UserFamilyCreate) -> UserFamily:
        """Add a membership. Adding an existing (user, family) pair returns the stored row."""

    @abstractmethod
    def get_users_by_family(self, family_id: int) -> list[User]: ...

    @abstractmethod
    def get_families_by_user(self, user_id: int) -> list[Family]: ...

    @abstractmethod
    def remove_user_from_family(self, user_id: int, family_id: int) -> bool:
        """Drop a membership. Returns False if there was none."""

    # Bookshelves

    @abstractmethod
    def get_bookshelf(self, bookshelf_id: int) -> Bookshelf | None: ...

    @abstractmethod
    def create_bookshelf(self, bookshelf: BookshelfCreate) -> Bookshelf: ...

    @abstractmethod
    def get_all_bookshelves(self) -> list[Bookshelf]: ...

    @abstractmethod
    def get_bookshelves_by_user(self, user_id: int) -> list[Bookshelf]:
        """Every bookshelf owned by the user, private ones included."""

    @abstractmethod
    def get_bookshelves_by_family(
        self, family_id: int, include_private: bool = False
    ) -> list[Bookshelf]:
        """Bookshelves of a family; private ones only when asked for."""

    @abstractmethod
    def update_bookshelf(self, bookshelf_id: int, update: BookshelfUpdate) -> Bookshelf | None: ...

    @abstractmethod
    def delete_bookshelf(self, bookshelf_id: int) -> bool:
        """
        Delete an empty bookshelf.

        Returns False, leaving everything in place, when the bookshelf is absent
        or still holds books. Callers move or remove its books first.
        """

    # Books

    @abstractmethod
    def get_book(self, book_id: int) -> Book | None: ...

    @abstractmethod
    def create_book(self, book: BookCreate) -> Book:
        """Store a book, stamping ``added_date``."""

    @abstractmethod
    def update_book(self, book_id: int, update: BookUpdate) -> Book | None: ...

    @abstractmethod
    def get_all_books(self) -> list[Book]: ...

    @abstractmethod
    def get_books_by_bookshelf(self, bookshelf_id: int) -> list[Book]: ...

    @abstractmethod
    def search_books(self, query: str) -> list[Book]:
        """
        Case-insensitive substring search.

        A book matches when the query occurs in its title, author, category
        or isbn; any one field is enough.
        """

    # Lendings

    @abstractmethod
    def get_book_lending(self, lending_id: int) -> BookLending | None: ...

    @abstractmethod
    def create_book_lending(self, lending: BookLendingCreate) -> BookLending:
        """Store a lending, stamping ``lend_date``. The book itself is not touched."""

    @abstractmethod
    def get_all_book_lendings(self) -> list[BookLending]: ...

    @abstractmethod
    def get_book_lendings_by_lender(self, lender_id: int) -> list[BookLending]: ...

    @abstractmethod
    def get_book_lendings_by_borrower(self, borrower_id: int) -> list[BookLending]: ...

    @abstractmethod
    def get_book_lendings_by_book(self, book_id: int) -> list[BookLending]: ...

    @abstractmethod
    def return_book(self, lending_id: int) -> BookLending | None:
        """
        Mark a lending returned and stamp ``return_date``.

        The book's status is left alone. Returning an already returned
        lending gives back the stored record unchanged.
        """

    @abstractmethod
    def return_book_and_release(self, lending_id: int) -> tuple[BookLending, Book | None] | None:
        """
        Return a lending and reset its book's status in one step.

        The book goes back to "reading" if someone has an open reading session
        for it, otherwise to "available". Already returned lendings are left
        unchanged.
        """

    # Reading history

    @abstractmethod
    def get_reading_history(self, history_id: int) -> ReadingHistory | None: ...

    @abstractmethod
    def create_reading_history(self, history: ReadingHistoryCreate) -> ReadingHistory:
        """Store a reading session; ``start_date`` defaults to now."""

    @abstractmethod
    def get_all_reading_history(self) -> list[ReadingHistory]: ...

    @abstractmethod
    def get_reading_history_by_user(self, user_id: int) -> list[ReadingHistory]: ...

    @abstractmethod
    def get_reading_history_by_book(self, book_id: int) -> list[ReadingHistory]: ...

    @abstractmethod
    def complete_reading_history(
        self, history_id: int, completion: ReadingHistoryComplete
    ) -> ReadingHistory | None:
        """Merge the completion fields that were set."""

    # Activities

    @abstractmethod
    def create_activity(self, activity: ActivityCreate) -> Activity:
        """Append a feed entry, stamping ``timestamp``."""

    @abstractmethod
    def get_all_activities(self, limit: int | None = None) -> list[Activity]:
        """Newest first, truncated to ``limit`` when given."""

    @abstractmethod
    def get_activities_by_user(self, user_id: int, limit: int | None = None) -> list[Activity]:
        """Activities where the user is the actor or the counterparty, newest first."""

    @abstractmethod
    def get_activities_by_family(self, family_id: int, limit: int | None = None) -> list[Activity]:
        """Activities whose actor or counterparty belongs to the family, newest first."""

    # Seeding

    def initialize_sample_data(self) -> None:
        """Load the demo household through the public create methods."""
        from family_library.storage.sample_data import load_sample_data

        load_sample_data(self)


def newest_first(activities: Iterable[Activity], limit: int | None = None) -> list[Activity]:
    """Sort by timestamp descending; ids break ties so equal timestamps stay stable."""
    ordered = sorted(activities, key=lambda a: (a.timestamp, a.id), reverse=True)
    return ordered[:limit] if limit else ordered


def utcnow() -> datetime:
    return datetime.utcnow()
