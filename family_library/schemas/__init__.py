from family_library.schemas.activity import Activity, ActivityCreate
from family_library.schemas.auth import Token
from family_library.schemas.book import Book, BookCreate, BookUpdate
from family_library.schemas.bookshelf import Bookshelf, BookshelfCreate, BookshelfUpdate
from family_library.schemas.common import ActivityType, BookStatus, LendingStatus, ShelfPosition
from family_library.schemas.family import Family, FamilyCreate, UserFamily, UserFamilyCreate
from family_library.schemas.lending import BookLending, BookLendingCreate
from family_library.schemas.reading import (
    ReadingHistory,
    ReadingHistoryComplete,
    ReadingHistoryCreate,
)
from family_library.schemas.user import OnlineStatusUpdate, User, UserCreate, UserResponse
from family_library.schemas.validation import (
    FieldError,
    SchemaValidationError,
    validate_payload,
)

__all__ = [
    # Users & families
    "User",
    "UserCreate",
    "UserResponse",
    "OnlineStatusUpdate",
    "Token",
    "Family",
    "FamilyCreate",
    "UserFamily",
    "UserFamilyCreate",
    # Shelves & books
    "Bookshelf",
    "BookshelfCreate",
    "BookshelfUpdate",
    "Book",
    "BookCreate",
    "BookUpdate",
    "ShelfPosition",
    "BookStatus",
    # Lending & reading
    "BookLending",
    "BookLendingCreate",
    "LendingStatus",
    "ReadingHistory",
    "ReadingHistoryCreate",
    "ReadingHistoryComplete",
    # Activity feed
    "Activity",
    "ActivityCreate",
    "ActivityType",
    # Validation
    "FieldError",
    "SchemaValidationError",
    "validate_payload",
]
