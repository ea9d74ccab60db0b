from fastapi import APIRouter, Depends, Query, status

from family_library.api.deps import get_storage
from family_library.schemas import BookLending, BookLendingCreate
from family_library.services import lending_service
from family_library.storage import Storage

router = APIRouter()


@router.get("", response_model=list[BookLending])
async def list_lendings(
    lender_id: int | None = Query(None),
    borrower_id: int | None = Query(None),
    book_id: int | None = Query(None),
    storage: Storage = Depends(get_storage),
):
    return lending_service.list_lendings(
        storage, lender_id=lender_id, borrower_id=borrower_id, book_id=book_id
    )


@router.post("", response_model=BookLending, status_code=status.HTTP_201_CREATED)
async def lend_book(lending_data: BookLendingCreate, storage: Storage = Depends(get_storage)):
    """Lend an available book to another family member."""
    return lending_service.lend_book(storage, lending_data)


@router.get("/{lending_id}", response_model=BookLending)
async def get_lending(lending_id: int, storage: Storage = Depends(get_storage)):
    return lending_service.get_lending(storage, lending_id)


@router.patch("/{lending_id}/return", response_model=BookLending)
async def return_book(lending_id: int, storage: Storage = Depends(get_storage)):
    """Mark a lending returned and release the book."""
    return lending_service.return_book(storage, lending_id)
