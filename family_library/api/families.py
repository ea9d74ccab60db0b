from fastapi import APIRouter, Depends, Query, status

from family_library.api.deps import get_storage
from family_library.schemas import Family, FamilyCreate, UserFamily, UserFamilyCreate, UserResponse
from family_library.services import family_service
from family_library.storage import Storage

router = APIRouter()
memberships_router = APIRouter()


@router.get("", response_model=list[Family])
async def list_families(storage: Storage = Depends(get_storage)):
    return storage.get_all_families()


@router.post("", response_model=Family, status_code=status.HTTP_201_CREATED)
async def create_family(
    family_data: FamilyCreate,
    creator_id: int | None = Query(None, ge=1, description="User who joins the new family"),
    storage: Storage = Depends(get_storage),
):
    return family_service.create_family(storage, family_data, creator_id=creator_id)


@router.get("/{family_id}", response_model=Family)
async def get_family(family_id: int, storage: Storage = Depends(get_storage)):
    return family_service.get_family(storage, family_id)


@router.get("/{family_id}/users", response_model=list[UserResponse])
async def get_family_members(family_id: int, storage: Storage = Depends(get_storage)):
    return family_service.get_members(storage, family_id)


@router.delete("/{family_id}/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_family_member(
    family_id: int,
    user_id: int,
    storage: Storage = Depends(get_storage),
):
    family_service.remove_member(storage, family_id, user_id)


@memberships_router.post("", response_model=UserFamily, status_code=status.HTTP_201_CREATED)
async def add_family_member(
    membership: UserFamilyCreate,
    storage: Storage = Depends(get_storage),
):
    """Add a user to a family."""
    return family_service.add_member(storage, membership)
