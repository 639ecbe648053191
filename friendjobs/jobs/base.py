from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar

from sqlalchemy.ext.asyncio import AsyncSession

from friendjobs.jobs import arguments as job_arguments


logger = logging.getLogger("friendjobs.jobs")


class UnknownJobError(LookupError):
    pass


_registry: dict[str, type[Job]] = {}


def job_class_for(name: str) -> type[Job]:
    try:
        return _registry[name]
    except KeyError:
        raise UnknownJobError(f"Unknown job class {name!r}") from None


class Job:
    """Unit of deferred work.

    Subclasses implement ``async perform(*args)``. Arguments are serialized
    with :mod:`friendjobs.jobs.arguments`, so records are passed by global id
    and located again inside the session the job runs in (``self.session``).
    """

    queue_name: ClassVar[str] = "default"
    priority: ClassVar[int | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _registry[cls.__name__] = cls

    def __init__(self, *args: Any) -> None:
        self.arguments = list(args)
        self.serialized_arguments: list[Any] | None = None
        self.job_id = str(uuid.uuid4())
        self.provider_job_id: str | None = None
        self.executions = 0
        self.enqueued_at: datetime | None = None
        self.scheduled_at: datetime | None = None
        self.session: AsyncSession | None = None

    async def perform(self, *args: Any) -> None:
        raise NotImplementedError

    @classmethod
    async def perform_later(cls, *args: Any, wait: float | timedelta | None = None) -> Job:
        """Enqueue on the configured queue adapter and return the job."""

        from friendjobs.worker.dispatch import get_queue_adapter

        job = cls(*args)
        job.enqueued_at = datetime.now(timezone.utc)
        if wait is not None:
            if not isinstance(wait, timedelta):
                wait = timedelta(seconds=wait)
            job.scheduled_at = job.enqueued_at + wait

        adapter = get_queue_adapter()
        await adapter.enqueue(job)
        logger.info(
            "Enqueued %s (job_id=%s) to %s(%s)",
            cls.__name__,
            job.job_id,
            type(adapter).__name__,
            job.queue_name,
        )
        return job

    @classmethod
    async def perform_now(cls, *args: Any) -> None:
        """Run the job in this process, through the same serialization as the worker."""

        await execute(cls(*args).serialize())

    def serialize(self) -> dict[str, Any]:
        if self.serialized_arguments is None:
            self.serialized_arguments = job_arguments.serialize(self.arguments)
        return {
            "job_class": type(self).__name__,
            "job_id": self.job_id,
            "provider_job_id": self.provider_job_id,
            "queue_name": self.queue_name,
            "priority": self.priority,
            "arguments": self.serialized_arguments,
            "executions": self.executions,
            "enqueued_at": self.enqueued_at.isoformat() if self.enqueued_at else None,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
        }

    @classmethod
    def deserialize(cls, payload: dict[str, Any]) -> Job:
        job = job_class_for(payload["job_class"])()
        job.job_id = payload["job_id"]
        job.provider_job_id = payload.get("provider_job_id")
        job.serialized_arguments = list(payload.get("arguments") or [])
        job.executions = int(payload.get("executions") or 0)
        if payload.get("enqueued_at"):
            job.enqueued_at = datetime.fromisoformat(payload["enqueued_at"])
        if payload.get("scheduled_at"):
            job.scheduled_at = datetime.fromisoformat(payload["scheduled_at"])
        return job


async def execute(payload: dict[str, Any]) -> None:
    """Rebuild a job from its payload and perform it in a fresh session."""

    from friendjobs.database import SessionLocal

    job = Job.deserialize(payload)
    job.executions += 1
    job_name = type(job).__name__

    start = time.perf_counter()
    async with SessionLocal() as session:
        job.session = session
        try:
            job.arguments = await job_arguments.deserialize(session, job.serialized_arguments or [])
            logger.info(
                "Performing %s (job_id=%s) from queue %s",
                job_name,
                job.job_id,
                job.queue_name,
                extra={"job_id": job.job_id, "executions": job.executions},
            )
            await job.perform(*job.arguments)
            await session.commit()
        except Exception:
            logger.exception("Error performing %s (job_id=%s)", job_name, job.job_id)
            raise
        finally:
            job.session = None

    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("Performed %s (job_id=%s) in %.2fms", job_name, job.job_id, duration_ms)
