from fastapi import APIRouter, Depends, Query, status

from family_library.api.deps import get_storage
from family_library.schemas import Book, BookCreate, BookUpdate
from family_library.services import book_service
from family_library.storage import Storage

router = APIRouter()


@router.get("", response_model=list[Book])
async def list_books(
    bookshelf_id: int | None = Query(None),
    q: str | None = Query(None, description="Search title, author, category or isbn"),
    storage: Storage = Depends(get_storage),
):
    return book_service.list_books(storage, bookshelf_id=bookshelf_id, q=q)


@router.post("", response_model=Book, status_code=status.HTTP_201_CREATED)
async def add_book(book_data: BookCreate, storage: Storage = Depends(get_storage)):
    """Add a book to a bookshelf."""
    return book_service.add_book(storage, book_data)


@router.get("/{book_id}", response_model=Book)
async def get_book(book_id: int, storage: Storage = Depends(get_storage)):
    """Get book details by ID."""
    return book_service.get_book(storage, book_id)


@router.patch("/{book_id}", response_model=Book)
async def update_book(
    book_id: int,
    update: BookUpdate,
    storage: Storage = Depends(get_storage),
):
    return book_service.update_book(storage, book_id, update)
