from family_library.core.config import Settings
from family_library.core.database import build_engine, build_session_factory, create_tables
from family_library.core.logging import get_logger
from family_library.storage.base import Storage
from family_library.storage.memory import MemStorage
from family_library.storage.sql import SqlStorage

logger = get_logger(__name__)


def build_storage(settings: Settings) -> Storage:
    """Create the backend selected by ``STORAGE_BACKEND``, seeding it if configured."""
    if settings.STORAGE_BACKEND == "sql":
        engine = build_engine(settings.DATABASE_URL)
        create_tables(engine)
        storage: Storage = SqlStorage(build_session_factory(engine))
    else:
        storage = MemStorage()

    logger.info(
        "Storage backend ready",
        extra={"extra_fields": {"backend": settings.STORAGE_BACKEND}},
    )

    if settings.SEED_SAMPLE_DATA:
        storage.initialize_sample_data()
        logger.info("Sample data loaded")

    return storage


__all__ = ["Storage", "MemStorage", "SqlStorage", "build_storage"]
