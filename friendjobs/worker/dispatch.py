"""Queue adapters: how ``Job.perform_later`` hands work to a queue engine.

The adapter is chosen by ``settings.queue_adapter``:

- ``celery``: send the payload to the ``friendjobs.execute_job`` task.
- ``inline``: execute immediately in the calling process.
- ``test``: keep payloads in memory until ``perform_enqueued_jobs`` runs them.
"""

from __future__ import annotations

import logging
from typing import Any

from friendjobs.config import settings
from friendjobs.jobs.base import Job, execute


logger = logging.getLogger(__name__)


class CeleryAdapter:
    async def enqueue(self, job: Job) -> None:
        # Imported lazily so the API only needs Celery when this adapter is used.
        from friendjobs.worker.tasks import execute_job

        options: dict[str, Any] = {"queue": job.queue_name}
        if job.priority is not None:
            options["priority"] = job.priority
        if job.scheduled_at is not None and job.enqueued_at is not None:
            options["countdown"] = max((job.scheduled_at - job.enqueued_at).total_seconds(), 0)

        result = execute_job.apply_async(args=[job.serialize()], **options)
        job.provider_job_id = result.id


class InlineAdapter:
    async def enqueue(self, job: Job) -> None:
        if job.scheduled_at is not None:
            raise NotImplementedError("Use a queueing backend to enqueue jobs in the future")
        await execute(job.serialize())


class TestAdapter:
    __test__ = False  # not a pytest test class

    def __init__(self) -> None:
        self.enqueued_jobs: list[dict[str, Any]] = []
        self.performed_jobs: list[dict[str, Any]] = []

    async def enqueue(self, job: Job) -> None:
        self.enqueued_jobs.append(job.serialize())

    async def perform_enqueued_jobs(self) -> int:
        """Execute and drain everything enqueued so far, oldest first."""

        count = 0
        while self.enqueued_jobs:
            payload = self.enqueued_jobs.pop(0)
            await execute(payload)
            self.performed_jobs.append(payload)
            count += 1
        return count

    def clear(self) -> None:
        self.enqueued_jobs.clear()
        self.performed_jobs.clear()


_ADAPTERS = {
    "celery": CeleryAdapter,
    "inline": InlineAdapter,
    "test": TestAdapter,
}

_adapter: Any = None


def build_queue_adapter(name: str):
    try:
        return _ADAPTERS[name]()
    except KeyError:
        raise ValueError(f"Unknown queue adapter {name!r}; expected one of {sorted(_ADAPTERS)}") from None


def get_queue_adapter():
    global _adapter
    if _adapter is None:
        _adapter = build_queue_adapter(settings.queue_adapter)
        logger.info("queue adapter=%s", settings.queue_adapter)
    return _adapter


def set_queue_adapter(adapter) -> None:
    """Replace the process-wide adapter (None resets to the configured one)."""

    global _adapter
    _adapter = adapter
