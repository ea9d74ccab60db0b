from family_library.core.logging import get_logger
from family_library.core.security import get_password_hash, verify_password
from family_library.schemas import Family, User, UserCreate
from family_library.services.exceptions import DuplicateUsernameError, NotFoundError
from family_library.storage import Storage

logger = get_logger(__name__)


def get_user(storage: Storage, user_id: int) -> User:
    """Get a user or raise NotFoundError."""
    user = storage.get_user(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


def create_user(storage: Storage, user_data: UserCreate) -> User:
    """Create a user with a hashed password. Usernames are unique ignoring case."""
    if storage.get_user_by_username(user_data.username):
        raise DuplicateUsernameError(user_data.username)

    hashed = user_data.model_copy(update={"password": get_password_hash(user_data.password)})
    user = storage.create_user(hashed)
    logger.info(
        "User created",
        extra={"extra_fields": {"user_id": user.id, "username": user.username}},
    )
    return user


def authenticate_user(storage: Storage, username: str, password: str) -> User | None:
    """Return the user if the credentials match, None otherwise."""
    user = storage.get_user_by_username(username)
    if not user or not verify_password(password, user.password):
        return None
    return user


def set_online_status(storage: Storage, user_id: int, is_online: bool) -> User:
    user = storage.update_user_online_status(user_id, is_online)
    if not user:
        raise NotFoundError("User", user_id)
    return user


def get_user_families(storage: Storage, user_id: int) -> list[Family]:
    get_user(storage, user_id)
    return storage.get_families_by_user(user_id)
