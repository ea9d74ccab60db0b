"""
Shared FastAPI dependencies.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from family_library.core.config import get_settings
from family_library.core.security import decode_access_token
from family_library.schemas import User
from family_library.storage import Storage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{get_settings().API_PREFIX}/auth/login")


def get_storage(request: Request) -> Storage:
    """The storage backend built at startup."""
    return request.app.state.storage


def get_current_user(
    token: str = Depends(oauth2_scheme),
    storage: Storage = Depends(get_storage),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    subject = decode_access_token(token)
    if subject is None or not subject.isdigit():
        raise credentials_exception

    user = storage.get_user(int(subject))
    if not user:
        raise credentials_exception
    return user
