from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from family_library.api.deps import get_current_user, get_storage
from family_library.schemas import Token, User, UserCreate, UserResponse
from family_library.services import auth_service, user_service
from family_library.storage import Storage

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, storage: Storage = Depends(get_storage)):
    """Register a new user."""
    return user_service.create_user(storage, user_data)


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    storage: Storage = Depends(get_storage),
):
    """Authenticate user and return JWT token."""
    token = auth_service.login(storage, form_data.username, form_data.password)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Mark the current user offline."""
    auth_service.logout(storage, current_user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user info."""
    return current_user
