from fastapi import APIRouter, Depends, status

from family_library.api.deps import get_storage
from family_library.schemas import Family, OnlineStatusUpdate, UserCreate, UserResponse
from family_library.services import user_service
from family_library.storage import Storage

router = APIRouter()


@router.get("", response_model=list[UserResponse])
async def list_users(storage: Storage = Depends(get_storage)):
    return storage.get_all_users()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user_data: UserCreate, storage: Storage = Depends(get_storage)):
    return user_service.create_user(storage, user_data)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    return user_service.get_user(storage, user_id)


@router.get("/{user_id}/families", response_model=list[Family])
async def get_user_families(user_id: int, storage: Storage = Depends(get_storage)):
    """Families the user belongs to."""
    return user_service.get_user_families(storage, user_id)


@router.patch("/{user_id}/online", response_model=UserResponse)
async def update_online_status(
    user_id: int,
    update: OnlineStatusUpdate,
    storage: Storage = Depends(get_storage),
):
    return user_service.set_online_status(storage, user_id, update.is_online)
