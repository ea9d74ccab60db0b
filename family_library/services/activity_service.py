"""
Activity feed recording and queries.

Other services call ``record`` after every state change worth showing in the
family feed; the API also exposes ``record_activity`` for client-side events.
"""

from typing import Any

from family_library.core.logging import get_logger
from family_library.schemas import Activity, ActivityCreate, ActivityType
from family_library.services.exceptions import NotFoundError
from family_library.storage import Storage

logger = get_logger(__name__)


def record(
    storage: Storage,
    user_id: int,
    activity_type: ActivityType,
    book_id: int | None,
    related_user_id: int | None = None,
    **data: Any,
) -> Activity:
    """Append a feed entry; keyword arguments become its ``data`` mapping."""
    activity = storage.create_activity(
        ActivityCreate(
            user_id=user_id,
            activity_type=activity_type,
            book_id=book_id,
            related_user_id=related_user_id,
            data=data or None,
        )
    )
    logger.debug(
        f"Recorded {activity_type} activity",
        extra={"extra_fields": {"activity_id": activity.id, "user_id": user_id}},
    )
    return activity


def record_activity(storage: Storage, activity_data: ActivityCreate) -> Activity:
    if not storage.get_user(activity_data.user_id):
        raise NotFoundError("User", activity_data.user_id)
    if activity_data.book_id is not None and not storage.get_book(activity_data.book_id):
        raise NotFoundError("Book", activity_data.book_id)
    if activity_data.related_user_id is not None and not storage.get_user(
        activity_data.related_user_id
    ):
        raise NotFoundError("User", activity_data.related_user_id)

    return storage.create_activity(activity_data)


def list_activities(
    storage: Storage,
    user_id: int | None = None,
    family_id: int | None = None,
    limit: int | None = None,
) -> list[Activity]:
    """Newest first. A family filter wins over a user filter."""
    if family_id is not None:
        return storage.get_activities_by_family(family_id, limit)
    if user_id is not None:
        return storage.get_activities_by_user(user_id, limit)
    return storage.get_all_activities(limit)
