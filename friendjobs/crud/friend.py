from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from friendjobs.crud.base import BaseCRUD
from friendjobs.models.friend import Friend
from friendjobs.schemas.friend import FriendCreate, FriendUpdate


friend_crud: BaseCRUD[Friend, FriendCreate, FriendUpdate] = BaseCRUD(Friend)


async def create_friend(session: AsyncSession, obj_in: FriendCreate) -> Friend:
    friend = await friend_crud.create(session, obj_in=obj_in)
    await session.commit()
    return friend


async def get_friend(session: AsyncSession, *, friend_id: int) -> Friend | None:
    return await friend_crud.get(session, id=friend_id)


async def list_friends(session: AsyncSession, *, limit: int = 50, offset: int = 0) -> list[Friend]:
    return await friend_crud.get_multi(session, skip=offset, limit=limit)
