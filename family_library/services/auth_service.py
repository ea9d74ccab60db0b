"""
Login and logout.

Tokens are stateless JWTs, so logging out only flips the user's presence
flag; the token itself stays valid until it expires.
"""

from family_library.core.logging import get_logger
from family_library.core.security import create_access_token
from family_library.schemas import Token, User, UserResponse
from family_library.services import user_service
from family_library.storage import Storage

logger = get_logger(__name__)


def login(storage: Storage, username: str, password: str) -> Token | None:
    """Authenticate and issue an access token. Returns None on bad credentials."""
    user = user_service.authenticate_user(storage, username, password)
    if not user:
        logger.info("Failed login attempt", extra={"extra_fields": {"username": username}})
        return None

    user = storage.update_user_online_status(user.id, True) or user
    access_token = create_access_token(data={"sub": str(user.id)})
    return Token(access_token=access_token, user=UserResponse.model_validate(user))


def logout(storage: Storage, user: User) -> None:
    storage.update_user_online_status(user.id, False)
    logger.info("User logged out", extra={"extra_fields": {"user_id": user.id}})
