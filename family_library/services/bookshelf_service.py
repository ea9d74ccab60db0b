from family_library.core.logging import get_logger
from family_library.schemas import Bookshelf, BookshelfCreate, BookshelfUpdate
from family_library.services.exceptions import (
    BookshelfNotEmptyError,
    InvalidShelfPositionError,
    NotFoundError,
)
from family_library.services.family_service import get_family
from family_library.services.user_service import get_user
from family_library.storage import Storage

logger = get_logger(__name__)


def get_bookshelf(storage: Storage, bookshelf_id: int) -> Bookshelf:
    """Get a bookshelf or raise NotFoundError."""
    bookshelf = storage.get_bookshelf(bookshelf_id)
    if not bookshelf:
        raise NotFoundError("Bookshelf", bookshelf_id)
    return bookshelf


def list_bookshelves(
    storage: Storage,
    user_id: int | None = None,
    family_id: int | None = None,
    include_private: bool = False,
) -> list[Bookshelf]:
    """
    List bookshelves.

    Filtering by family hides private shelves unless ``include_private`` is
    set; filtering by owner always includes them.
    """
    if family_id is not None:
        shelves = storage.get_bookshelves_by_family(family_id, include_private=include_private)
        if user_id is not None:
            shelves = [s for s in shelves if s.user_id == user_id]
        return shelves
    if user_id is not None:
        return storage.get_bookshelves_by_user(user_id)
    return storage.get_all_bookshelves()


def create_bookshelf(storage: Storage, bookshelf_data: BookshelfCreate) -> Bookshelf:
    get_family(storage, bookshelf_data.family_id)
    get_user(storage, bookshelf_data.user_id)

    bookshelf = storage.create_bookshelf(bookshelf_data)
    logger.info(
        "Bookshelf created",
        extra={"extra_fields": {"bookshelf_id": bookshelf.id, "family_id": bookshelf.family_id}},
    )
    return bookshelf


def update_bookshelf(storage: Storage, bookshelf_id: int, update: BookshelfUpdate) -> Bookshelf:
    """Apply a partial update. Shrinking may not strand books on a removed shelf row."""
    get_bookshelf(storage, bookshelf_id)

    if update.num_shelves is not None:
        for book in storage.get_books_by_bookshelf(bookshelf_id):
            if book.shelf_position.shelf >= update.num_shelves:
                raise InvalidShelfPositionError(book.shelf_position.shelf, update.num_shelves)

    return storage.update_bookshelf(bookshelf_id, update)


def delete_bookshelf(storage: Storage, bookshelf_id: int) -> None:
    get_bookshelf(storage, bookshelf_id)
    if storage.get_books_by_bookshelf(bookshelf_id):
        raise BookshelfNotEmptyError(bookshelf_id)

    storage.delete_bookshelf(bookshelf_id)
    logger.info("Bookshelf deleted", extra={"extra_fields": {"bookshelf_id": bookshelf_id}})
