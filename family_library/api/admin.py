"""
Administrative endpoints.

These are unauthenticated and meant for local development and demos.
"""

from fastapi import APIRouter, Depends

from family_library.api.deps import get_storage
from family_library.core.logging import get_logger
from family_library.services import ConflictError
from family_library.storage.sample_data import SAMPLE_USERS
from family_library.storage import Storage

logger = get_logger(__name__)

router = APIRouter()


@router.post("/init-sample-data")
async def init_sample_data(storage: Storage = Depends(get_storage)):
    """Load the demo household into the current storage backend."""
    if storage.get_user_by_username(SAMPLE_USERS[0]["username"]):
        raise ConflictError("Sample data is already loaded")

    storage.initialize_sample_data()
    logger.info("Sample data initialized via API")
    return {"message": "Sample data initialized successfully"}
