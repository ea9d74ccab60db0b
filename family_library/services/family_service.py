from family_library.core.logging import get_logger
from family_library.schemas import Family, FamilyCreate, User, UserFamily, UserFamilyCreate
from family_library.services.exceptions import (
    AlreadyMemberError,
    MembershipNotFoundError,
    NotFoundError,
)
from family_library.services.user_service import get_user
from family_library.storage import Storage

logger = get_logger(__name__)


def get_family(storage: Storage, family_id: int) -> Family:
    """Get a family or raise NotFoundError."""
    family = storage.get_family(family_id)
    if not family:
        raise NotFoundError("Family", family_id)
    return family


def create_family(
    storage: Storage, family_data: FamilyCreate, creator_id: int | None = None
) -> Family:
    """Create a family. When a creator is given they become its first member."""
    if creator_id is not None:
        get_user(storage, creator_id)

    family = storage.create_family(family_data)
    if creator_id is not None:
        storage.add_user_to_family(UserFamilyCreate(user_id=creator_id, family_id=family.id))

    logger.info(
        "Family created",
        extra={"extra_fields": {"family_id": family.id, "creator_id": creator_id}},
    )
    return family


def add_member(storage: Storage, membership: UserFamilyCreate) -> UserFamily:
    get_user(storage, membership.user_id)
    get_family(storage, membership.family_id)

    current = storage.get_families_by_user(membership.user_id)
    if any(f.id == membership.family_id for f in current):
        raise AlreadyMemberError(membership.user_id, membership.family_id)

    return storage.add_user_to_family(membership)


def remove_member(storage: Storage, family_id: int, user_id: int) -> None:
    if not storage.remove_user_from_family(user_id, family_id):
        raise MembershipNotFoundError(user_id, family_id)
    logger.info(
        "Member removed from family",
        extra={"extra_fields": {"family_id": family_id, "user_id": user_id}},
    )


def get_members(storage: Storage, family_id: int) -> list[User]:
    get_family(storage, family_id)
    return storage.get_users_by_family(family_id)
