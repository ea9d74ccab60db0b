from fastapi import APIRouter, Depends, Query, status

from family_library.api.deps import get_storage
from family_library.schemas import Activity, ActivityCreate
from family_library.services import activity_service
from family_library.storage import Storage

router = APIRouter()


@router.get("", response_model=list[Activity])
async def list_activities(
    user_id: int | None = Query(None, description="Actor or counterparty"),
    family_id: int | None = Query(None, description="Any member as actor or counterparty"),
    limit: int | None = Query(None, ge=0, description="0 or omitted returns everything"),
    storage: Storage = Depends(get_storage),
):
    """Activity feed, newest first."""
    return activity_service.list_activities(
        storage, user_id=user_id, family_id=family_id, limit=limit
    )


@router.post("", response_model=Activity, status_code=status.HTTP_201_CREATED)
async def record_activity(
    activity_data: ActivityCreate,
    storage: Storage = Depends(get_storage),
):
    return activity_service.record_activity(storage, activity_data)
