"""Health check endpoint."""

from fastapi import APIRouter, Depends

from .. import __version__
from ..config import settings
from ..services.store import FileTaskStore
from .collection import get_task_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(store: FileTaskStore = Depends(get_task_store)) -> dict[str, str | bool]:
    """Return service status and whether the task store file exists yet."""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "environment": settings.environment,
        "version": __version__,
        "store_exists": store.path.exists(),
    }
