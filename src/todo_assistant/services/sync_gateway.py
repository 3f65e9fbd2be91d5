"""HTTP sync between the in-memory task list and the backend store."""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..models.task import Task

logger = logging.getLogger(__name__)

COLLECTION_PATH = "/tasks-collection"

# Default timeout for backend requests (seconds)
DEFAULT_TIMEOUT = 10.0


class SyncGateway:
    """Pulls the whole list once, pushes the whole list after every change.

    Pushes go out one at a time. While a push is in flight, only the newest
    snapshot is kept waiting; intermediate snapshots are dropped. Failures are
    logged and never retried: the next mutation sends a fresh snapshot anyway.
    """

    def __init__(
        self,
        api_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )
        self._pending: list[dict[str, Any]] | None = None
        self._worker: asyncio.Task[None] | None = None

    async def __aenter__(self) -> "SyncGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def pull(self) -> list[Task]:
        """Fetch the stored list. Returns an empty list if the backend is unreachable."""
        try:
            response = await self._client.get(COLLECTION_PATH)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error loading tasks from backend: {e}")
            return []

        tasks: list[Task] = []
        for item in payload if isinstance(payload, list) else []:
            try:
                tasks.append(Task.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed stored task {item!r}: {e}")
        logger.info(f"Loaded {len(tasks)} tasks from backend")
        return tasks

    def push(self, tasks: list[Task]) -> None:
        """Schedule a full-list push. Must be called from a running event loop."""
        self._pending = [task.to_wire() for task in tasks]
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._drain())

    @property
    def busy(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def flush(self) -> None:
        """Wait until every scheduled snapshot has been sent (or failed)."""
        while self._worker is not None and not self._worker.done():
            await self._worker

    async def aclose(self) -> None:
        await self.flush()
        await self._client.aclose()

    async def _drain(self) -> None:
        while self._pending is not None:
            snapshot, self._pending = self._pending, None
            await self._send(snapshot)

    async def _send(self, snapshot: list[dict[str, Any]]) -> None:
        try:
            response = await self._client.post(COLLECTION_PATH, json=snapshot)
            response.raise_for_status()
            logger.debug(f"Pushed {len(snapshot)} tasks to backend")
        except httpx.HTTPError as e:
            logger.error(f"Error saving tasks to backend: {e}")
