from __future__ import annotations

import asyncio
import logging
from typing import Any

from friendjobs.database import engine
from friendjobs.jobs import execute
from friendjobs.worker.celery_app import celery_app


logger = logging.getLogger(__name__)

EXECUTE_JOB_TASK = "friendjobs.execute_job"


async def _run(payload: dict[str, Any]) -> None:
    try:
        await execute(payload)
    finally:
        # connections must not outlive the event loop that opened them
        await engine.dispose()


@celery_app.task(name=EXECUTE_JOB_TASK, bind=True)
def execute_job(self, payload: dict[str, Any]) -> None:
    """Run a serialized job on the worker.

    Errors propagate so Celery records the failure; retry policy is left to
    Celery configuration.
    """

    payload = dict(payload)
    payload["provider_job_id"] = self.request.id
    logger.info(
        "execute_job received",
        extra={"job_id": payload.get("job_id"), "job_class": payload.get("job_class")},
    )
    asyncio.run(_run(payload))
