"""Whole-list task persistence endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from ..config import settings
from ..models.task import StoreAck
from ..services.store import FileTaskStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def get_task_store() -> FileTaskStore:
    """Store backing the collection. Overridden in tests."""
    return FileTaskStore(settings.store_path)


@router.get("")
async def read_tasks(store: FileTaskStore = Depends(get_task_store)) -> list[dict[str, Any]]:
    """
    Return the full task list.

    An empty array is returned when no store file exists yet.
    """
    return store.read_all()


@router.post("", response_model=StoreAck)
async def write_tasks(
    tasks: list[dict[str, Any]],
    store: FileTaskStore = Depends(get_task_store),
) -> StoreAck:
    """
    Overwrite the stored task list with the request body.

    The body must be a JSON array. Items are stored as given; there is no
    partial update, versioning or conflict detection.
    """
    ack = store.write_all(tasks)
    logger.info(f"Task store overwritten with {len(tasks)} tasks")
    return ack
