from fastapi import APIRouter, Depends, Query, status

from family_library.api.deps import get_storage
from family_library.schemas import Book, Bookshelf, BookshelfCreate, BookshelfUpdate
from family_library.services import bookshelf_service
from family_library.storage import Storage

router = APIRouter()


@router.get("", response_model=list[Bookshelf])
async def list_bookshelves(
    user_id: int | None = Query(None, description="Owner filter, includes private shelves"),
    family_id: int | None = Query(None, description="Family filter"),
    include_private: bool = Query(False, description="Include private shelves in family results"),
    storage: Storage = Depends(get_storage),
):
    return bookshelf_service.list_bookshelves(
        storage, user_id=user_id, family_id=family_id, include_private=include_private
    )


@router.post("", response_model=Bookshelf, status_code=status.HTTP_201_CREATED)
async def create_bookshelf(
    bookshelf_data: BookshelfCreate,
    storage: Storage = Depends(get_storage),
):
    return bookshelf_service.create_bookshelf(storage, bookshelf_data)


@router.get("/{bookshelf_id}", response_model=Bookshelf)
async def get_bookshelf(bookshelf_id: int, storage: Storage = Depends(get_storage)):
    return bookshelf_service.get_bookshelf(storage, bookshelf_id)


@router.patch("/{bookshelf_id}", response_model=Bookshelf)
async def update_bookshelf(
    bookshelf_id: int,
    update: BookshelfUpdate,
    storage: Storage = Depends(get_storage),
):
    return bookshelf_service.update_bookshelf(storage, bookshelf_id, update)


@router.delete("/{bookshelf_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bookshelf(bookshelf_id: int, storage: Storage = Depends(get_storage)):
    """Delete an empty bookshelf."""
    bookshelf_service.delete_bookshelf(storage, bookshelf_id)


@router.get("/{bookshelf_id}/books", response_model=list[Book])
async def get_bookshelf_books(bookshelf_id: int, storage: Storage = Depends(get_storage)):
    bookshelf_service.get_bookshelf(storage, bookshelf_id)
    return storage.get_books_by_bookshelf(bookshelf_id)
