# repairdesk/core/registry.py
from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, List, Optional, Set
from zoneinfo import ZoneInfo

from repairdesk.config import get_settings
from repairdesk.core.models import JobCard, JobCardInput
from repairdesk.core.sequence import SequenceGenerator
from repairdesk.core.store import FileStore, KeyValueStore, StoreError
from repairdesk.services.whatsapp import Dispatcher, build_dispatcher

logger = logging.getLogger("repairdesk.registry")

JOBS_KEY = "jobs"
COUNTER_KEY = "job_id_counter"


class JobRegistryError(RuntimeError):
    """Persistence failure surfaced to callers with a user-facing message."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JobRegistry:
    """
    Owns the job list and the id counter in the store.

    The list is kept newest-first and rewritten as one blob on every create.
    There is no lock: one create at a time is assumed.
    """

    def __init__(
        self,
        store: KeyValueStore,
        dispatcher: Optional[Dispatcher] = None,
        prefix: str = "SST",
        list_delay: float = 0.0,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._sequence = SequenceGenerator(store, COUNTER_KEY)
        self._dispatcher = dispatcher
        self._prefix = prefix
        self._list_delay = list_delay
        self._clock = clock
        self._pending: Set[asyncio.Task] = set()

    def format_id(self, n: int) -> str:
        return f"{self._prefix}-{n:04d}"

    def _load(self) -> List[JobCard]:
        raw = self._store.get(JOBS_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("job list is not an array")
            return [JobCard.from_dict(item) for item in data]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreError(f"Corrupt job list: {e}") from e

    def _save(self, jobs: List[JobCard]) -> None:
        blob = json.dumps([j.to_dict() for j in jobs], ensure_ascii=False)
        self._store.set(JOBS_KEY, blob)

    async def create(self, data: JobCardInput) -> JobCard:
        # Store calls block the loop; they are small local writes.
        try:
            existing = self._load()
            job_id = self.format_id(self._sequence.next())
            job = JobCard.from_input(job_id, data, created_at=self._clock())
            self._save([job, *existing])
        except StoreError as e:
            logger.exception("Failed to create job")
            raise JobRegistryError("Failed to create job card.") from e

        logger.info("Created job %s for %s", job.id, job.customer_name)
        self._notify(job)
        return job

    async def list(self) -> List[JobCard]:
        await asyncio.sleep(self._list_delay)
        try:
            return self._load()
        except StoreError as e:
            logger.exception("Failed to load jobs")
            raise JobRegistryError("Failed to load job cards.") from e

    async def get(self, job_id: str) -> Optional[JobCard]:
        for job in await self.list():
            if job.id == job_id:
                return job
        return None

    def _notify(self, job: JobCard) -> None:
        # Fire-and-forget: the task's outcome is deliberately discarded.
        if self._dispatcher is None:
            return
        task = asyncio.create_task(self._dispatcher.dispatch(job))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def pending_notifications(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight notifications without cancelling them."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


@lru_cache(maxsize=1)
def get_registry() -> JobRegistry:
    settings = get_settings()
    return JobRegistry(
        FileStore(settings.DATA_DIR),
        dispatcher=build_dispatcher(settings, tz=ZoneInfo(settings.DISPLAY_TZ)),
        prefix=settings.JOB_ID_PREFIX,
        list_delay=settings.LIST_DELAY_MS / 1000.0,
    )
