from __future__ import annotations

import logging

from friendjobs.crud.friend import friend_crud
from friendjobs.jobs.base import Job
from friendjobs.models.friend import Friend


logger = logging.getLogger("friendjobs.jobs")


class NameCapitalizerJob(Job):
    queue_name = "default"

    async def perform(self, friend: Friend) -> None:
        if friend.name is None:
            logger.info("Friend %s has no name to capitalize", friend.id)
            return

        await friend_crud.update_attribute(
            self.session,
            db_obj=friend,
            name="name",
            value=friend.name.capitalize(),
        )
