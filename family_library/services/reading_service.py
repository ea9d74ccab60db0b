from family_library.core.logging import get_logger
from family_library.schemas import (
    BookUpdate,
    ReadingHistory,
    ReadingHistoryComplete,
    ReadingHistoryCreate,
)
from family_library.services import activity_service
from family_library.services.book_service import get_book
from family_library.services.exceptions import (
    LibraryError,
    NotFoundError,
    ReadingAlreadyCompletedError,
)
from family_library.services.user_service import get_user
from family_library.storage import Storage
from family_library.storage.base import utcnow

logger = get_logger(__name__)


def get_reading_history(storage: Storage, history_id: int) -> ReadingHistory:
    """Get a reading session or raise NotFoundError."""
    history = storage.get_reading_history(history_id)
    if not history:
        raise NotFoundError("Reading history", history_id)
    return history


def list_reading_history(
    storage: Storage, user_id: int | None = None, book_id: int | None = None
) -> list[ReadingHistory]:
    if user_id is not None:
        sessions = storage.get_reading_history_by_user(user_id)
        return [h for h in sessions if book_id is None or h.book_id == book_id]
    if book_id is not None:
        return storage.get_reading_history_by_book(book_id)
    return storage.get_all_reading_history()


def start_reading(storage: Storage, history_data: ReadingHistoryCreate) -> ReadingHistory:
    """
    Open a reading session.

    An available book becomes "reading"; a borrowed book keeps its status,
    since the lending is what counts for availability.
    """
    get_user(storage, history_data.user_id)
    book = get_book(storage, history_data.book_id)

    history = storage.create_reading_history(history_data)
    if history.end_date is None and book.status == "available":
        storage.update_book(book.id, BookUpdate(status="reading"))

    activity_service.record(
        storage, history.user_id, "read", book.id, action="started_reading"
    )
    logger.info(
        "Reading started",
        extra={"extra_fields": {"history_id": history.id, "book_id": book.id}},
    )
    return history


def complete_reading(
    storage: Storage, history_id: int, completion: ReadingHistoryComplete
) -> ReadingHistory:
    """
    Close a reading session.

    ``end_date`` defaults to now. The book goes back to "available" once no
    other session on it is still open. A rating also lands in the feed.
    """
    history = get_reading_history(storage, history_id)
    if history.end_date is not None:
        raise ReadingAlreadyCompletedError(history_id)

    end_date = completion.end_date or utcnow()
    if end_date < history.start_date:
        raise LibraryError("end_date must not be before start_date")

    completion = ReadingHistoryComplete(
        end_date=end_date,
        **completion.model_dump(exclude_unset=True, exclude={"end_date"}),
    )
    history = storage.complete_reading_history(history_id, completion)

    book = storage.get_book(history.book_id)
    if book and book.status == "reading":
        still_open = [
            h
            for h in storage.get_reading_history_by_book(book.id)
            if h.end_date is None and h.id != history.id
        ]
        if not still_open:
            storage.update_book(book.id, BookUpdate(status="available"))

    activity_service.record(
        storage, history.user_id, "read", history.book_id, action="finished_reading"
    )
    if completion.rating is not None:
        activity_service.record(
            storage,
            history.user_id,
            "rate",
            history.book_id,
            action="rated_book",
            rating=completion.rating,
        )

    logger.info(
        "Reading completed",
        extra={"extra_fields": {"history_id": history.id, "rating": history.rating}},
    )
    return history
