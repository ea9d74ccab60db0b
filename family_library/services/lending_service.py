"""
Lending books between family members.

Lending writes two records (the lending, then the book's status) without a
transaction around them; if the second write fails the lending exists while
the book still shows as available. Returning goes through the store's atomic
``return_book_and_release`` instead.
"""

from datetime import timedelta

from family_library.core.config import get_settings
from family_library.core.logging import get_logger
from family_library.schemas import BookLending, BookLendingCreate, BookUpdate
from family_library.services import activity_service
from family_library.services.book_service import get_book
from family_library.services.exceptions import (
    BookUnavailableError,
    LendingAlreadyReturnedError,
    NotFoundError,
)
from family_library.services.user_service import get_user
from family_library.storage import Storage
from family_library.storage.base import utcnow

logger = get_logger(__name__)


def get_lending(storage: Storage, lending_id: int) -> BookLending:
    """Get a lending or raise NotFoundError."""
    lending = storage.get_book_lending(lending_id)
    if not lending:
        raise NotFoundError("Lending", lending_id)
    return lending


def list_lendings(
    storage: Storage,
    lender_id: int | None = None,
    borrower_id: int | None = None,
    book_id: int | None = None,
) -> list[BookLending]:
    """Filters combine with AND."""
    if book_id is not None:
        lendings = storage.get_book_lendings_by_book(book_id)
    elif lender_id is not None:
        lendings = storage.get_book_lendings_by_lender(lender_id)
    elif borrower_id is not None:
        lendings = storage.get_book_lendings_by_borrower(borrower_id)
    else:
        return storage.get_all_book_lendings()

    return [
        lending
        for lending in lendings
        if (lender_id is None or lending.lender_id == lender_id)
        and (borrower_id is None or lending.borrower_id == borrower_id)
    ]


def lend_book(storage: Storage, lending_data: BookLendingCreate) -> BookLending:
    """
    Lend an available book.

    Without a due date the loan runs for DEFAULT_LOAN_DAYS. The book is marked
    borrowed and the borrower's feed gets a borrow entry.
    """
    book = get_book(storage, lending_data.book_id)
    get_user(storage, lending_data.lender_id)
    get_user(storage, lending_data.borrower_id)

    if book.status != "available":
        raise BookUnavailableError(book.id, book.status)

    if lending_data.due_date is None:
        due_date = utcnow() + timedelta(days=get_settings().DEFAULT_LOAN_DAYS)
        lending_data = lending_data.model_copy(update={"due_date": due_date})

    lending = storage.create_book_lending(lending_data)
    storage.update_book(book.id, BookUpdate(status="borrowed"))

    activity_service.record(
        storage,
        lending.borrower_id,
        "borrow",
        book.id,
        related_user_id=lending.lender_id,
        action="borrowed_book",
        lending_id=lending.id,
    )
    logger.info(
        "Book lent",
        extra={
            "extra_fields": {
                "lending_id": lending.id,
                "book_id": book.id,
                "lender_id": lending.lender_id,
                "borrower_id": lending.borrower_id,
            }
        },
    )
    return lending


def return_book(storage: Storage, lending_id: int) -> BookLending:
    """Return a borrowed book, releasing it for the next reader."""
    lending = get_lending(storage, lending_id)
    if lending.status == "returned":
        raise LendingAlreadyReturnedError(lending_id)

    result = storage.return_book_and_release(lending_id)
    if result is None:
        raise NotFoundError("Lending", lending_id)
    lending, book = result

    activity_service.record(
        storage,
        lending.borrower_id,
        "return",
        lending.book_id,
        related_user_id=lending.lender_id,
        action="returned_book",
        lending_id=lending.id,
    )
    logger.info(
        "Book returned",
        extra={
            "extra_fields": {
                "lending_id": lending.id,
                "book_id": lending.book_id,
                "book_status": book.status if book else None,
            }
        },
    )
    return lending
