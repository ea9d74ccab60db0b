from family_library.services import (
    activity_service,
    auth_service,
    book_service,
    bookshelf_service,
    family_service,
    lending_service,
    reading_service,
    user_service,
)
from family_library.services.exceptions import (
    AlreadyMemberError,
    BookshelfNotEmptyError,
    BookStatusConflictError,
    BookUnavailableError,
    ConflictError,
    DuplicateUsernameError,
    InvalidShelfPositionError,
    LendingAlreadyReturnedError,
    LibraryError,
    MembershipNotFoundError,
    NotFoundError,
    ReadingAlreadyCompletedError,
)

__all__ = [
    "activity_service",
    "auth_service",
    "book_service",
    "bookshelf_service",
    "family_service",
    "lending_service",
    "reading_service",
    "user_service",
    # Errors
    "LibraryError",
    "NotFoundError",
    "MembershipNotFoundError",
    "ConflictError",
    "DuplicateUsernameError",
    "AlreadyMemberError",
    "InvalidShelfPositionError",
    "BookUnavailableError",
    "LendingAlreadyReturnedError",
    "ReadingAlreadyCompletedError",
    "BookshelfNotEmptyError",
    "BookStatusConflictError",
]
