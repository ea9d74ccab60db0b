from family_library.models.activity import Activity
from family_library.models.book import Book, Bookshelf
from family_library.models.lending import BookLending, ReadingHistory
from family_library.models.user import Family, User, UserFamily

__all__ = [
    "User",
    "Family",
    "UserFamily",
    "Bookshelf",
    "Book",
    "BookLending",
    "ReadingHistory",
    "Activity",
]
