from fastapi import APIRouter

from family_library.api import (
    activities,
    admin,
    auth,
    books,
    bookshelves,
    families,
    lendings,
    reading_history,
    search,
    users,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(families.router, prefix="/families", tags=["families"])
router.include_router(families.memberships_router, prefix="/user-families", tags=["families"])
router.include_router(bookshelves.router, prefix="/bookshelves", tags=["bookshelves"])
router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(lendings.router, prefix="/book-lendings", tags=["lendings"])
router.include_router(reading_history.router, prefix="/reading-history", tags=["reading"])
router.include_router(activities.router, prefix="/activities", tags=["activities"])
router.include_router(search.router, prefix="/search", tags=["search"])
router.include_router(admin.router, tags=["admin"])
