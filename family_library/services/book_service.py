from family_library.core.logging import get_logger
from family_library.schemas import Book, BookCreate, Bookshelf, BookUpdate, ShelfPosition
from family_library.services import activity_service
from family_library.services.bookshelf_service import get_bookshelf
from family_library.services.exceptions import (
    BookStatusConflictError,
    InvalidShelfPositionError,
    NotFoundError,
)
from family_library.services.user_service import get_user
from family_library.storage import Storage

logger = get_logger(__name__)


def get_book(storage: Storage, book_id: int) -> Book:
    """Get a book or raise NotFoundError."""
    book = storage.get_book(book_id)
    if not book:
        raise NotFoundError("Book", book_id)
    return book


def check_shelf_position(bookshelf: Bookshelf, position: ShelfPosition) -> None:
    """The shelf row must exist on the bookshelf. Slots within a row are unbounded."""
    if position.shelf >= bookshelf.num_shelves:
        raise InvalidShelfPositionError(position.shelf, bookshelf.num_shelves)


def list_books(
    storage: Storage, bookshelf_id: int | None = None, q: str | None = None
) -> list[Book]:
    if q:
        books = search_books(storage, q)
        if bookshelf_id is not None:
            books = [b for b in books if b.bookshelf_id == bookshelf_id]
        return books
    if bookshelf_id is not None:
        return storage.get_books_by_bookshelf(bookshelf_id)
    return storage.get_all_books()


def search_books(storage: Storage, query: str) -> list[Book]:
    """Case-insensitive match on title, author, category or isbn. Blank matches nothing."""
    query = query.strip()
    if not query:
        return []
    return storage.search_books(query)


def add_book(storage: Storage, book_data: BookCreate) -> Book:
    """Place a new book on a bookshelf and announce it in the feed."""
    bookshelf = get_bookshelf(storage, book_data.bookshelf_id)
    get_user(storage, book_data.added_by_id)
    check_shelf_position(bookshelf, book_data.shelf_position)

    book = storage.create_book(book_data)
    activity_service.record(
        storage, book.added_by_id, "add", book.id, action="added_book", title=book.title
    )
    logger.info(
        "Book added",
        extra={"extra_fields": {"book_id": book.id, "bookshelf_id": book.bookshelf_id}},
    )
    return book


def expected_status(storage: Storage, book_id: int) -> str:
    """The status a book's open loans and reading sessions put it in."""
    if any(x.status != "returned" for x in storage.get_book_lendings_by_book(book_id)):
        return "borrowed"
    if any(h.end_date is None for h in storage.get_reading_history_by_book(book_id)):
        return "reading"
    return "available"


def update_book(storage: Storage, book_id: int, update: BookUpdate) -> Book:
    """
    Apply a partial update.

    Moving a book, either to another bookshelf or to another row, re-checks
    that the row exists on the destination. A status change must agree with
    the book's open loans and reading sessions; lending, returning and
    reading are what move it otherwise.
    """
    book = get_book(storage, book_id)

    if update.added_by_id is not None:
        get_user(storage, update.added_by_id)

    if update.bookshelf_id is not None or update.shelf_position is not None:
        bookshelf = get_bookshelf(storage, update.bookshelf_id or book.bookshelf_id)
        check_shelf_position(bookshelf, update.shelf_position or book.shelf_position)

    if update.status is not None and update.status != book.status:
        expected = expected_status(storage, book_id)
        if update.status != expected:
            raise BookStatusConflictError(book_id, update.status, expected)

    return storage.update_book(book_id, update)
