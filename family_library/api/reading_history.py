from fastapi import APIRouter, Depends, Query, status

from family_library.api.deps import get_storage
from family_library.schemas import ReadingHistory, ReadingHistoryComplete, ReadingHistoryCreate
from family_library.services import reading_service
from family_library.storage import Storage

router = APIRouter()


@router.get("", response_model=list[ReadingHistory])
async def list_reading_history(
    user_id: int | None = Query(None),
    book_id: int | None = Query(None),
    storage: Storage = Depends(get_storage),
):
    return reading_service.list_reading_history(storage, user_id=user_id, book_id=book_id)


@router.post("", response_model=ReadingHistory, status_code=status.HTTP_201_CREATED)
async def start_reading(
    history_data: ReadingHistoryCreate,
    storage: Storage = Depends(get_storage),
):
    return reading_service.start_reading(storage, history_data)


@router.get("/{history_id}", response_model=ReadingHistory)
async def get_reading_history(history_id: int, storage: Storage = Depends(get_storage)):
    return reading_service.get_reading_history(storage, history_id)


@router.patch("/{history_id}/complete", response_model=ReadingHistory)
async def complete_reading(
    history_id: int,
    completion: ReadingHistoryComplete | None = None,
    storage: Storage = Depends(get_storage),
):
    """Finish a reading session; the body is optional."""
    return reading_service.complete_reading(
        storage, history_id, completion or ReadingHistoryComplete()
    )
