from fastapi import APIRouter, Depends, Query

from family_library.api.deps import get_storage
from family_library.schemas import Book
from family_library.services import book_service
from family_library.storage import Storage

router = APIRouter()


@router.get("", response_model=list[Book])
async def search_books(
    q: str = Query(..., min_length=1, description="Search query"),
    storage: Storage = Depends(get_storage),
):
    """Search books by title, author, category or isbn."""
    return book_service.search_books(storage, q)
