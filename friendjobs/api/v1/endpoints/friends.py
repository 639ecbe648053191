from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from friendjobs.crud.friend import create_friend, friend_crud, get_friend, list_friends
from friendjobs.database import get_db
from friendjobs.globalid.locator import locate, locate_signed
from friendjobs.jobs import NameCapitalizerJob
from friendjobs.models.friend import Friend
from friendjobs.schemas.friend import (
    FriendCreate,
    FriendGlobalIDRead,
    FriendListResponse,
    FriendRead,
    FriendUpdate,
    JobEnqueuedResponse,
)

router = APIRouter(prefix="/friends", tags=["friends"])


async def _friend_or_404(session: AsyncSession, friend_id: int) -> Friend:
    friend = await get_friend(session, friend_id=friend_id)
    if friend is None:
        raise HTTPException(status_code=404, detail="Friend not found")
    return friend


@router.post("", response_model=FriendRead, status_code=201)
async def create_friend_endpoint(
    payload: FriendCreate,
    session: AsyncSession = Depends(get_db),
) -> FriendRead:
    friend = await create_friend(session, payload)
    return FriendRead.model_validate(friend)


@router.get("", response_model=FriendListResponse)
async def list_friends_endpoint(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db),
) -> FriendListResponse:
    items = await list_friends(session, limit=limit, offset=offset)
    return FriendListResponse(items=[FriendRead.model_validate(i) for i in items])


@router.get("/locate", response_model=FriendRead)
async def locate_friend_endpoint(
    gid: str | None = Query(None, description="gid:// URI or its param form"),
    sgid: str | None = Query(None, description="Signed global id"),
    purpose: str = Query("default"),
    session: AsyncSession = Depends(get_db),
) -> FriendRead:
    if (gid is None) == (sgid is None):
        raise HTTPException(status_code=422, detail="Provide exactly one of gid or sgid")

    if gid is not None:
        friend = await locate(session, gid, only=Friend)
    else:
        friend = await locate_signed(session, sgid, purpose=purpose, only=Friend)

    if friend is None:
        raise HTTPException(status_code=404, detail="Global id does not identify a friend")
    return FriendRead.model_validate(friend)


@router.get("/{friend_id}", response_model=FriendRead)
async def get_friend_endpoint(
    friend_id: int,
    session: AsyncSession = Depends(get_db),
) -> FriendRead:
    friend = await _friend_or_404(session, friend_id)
    return FriendRead.model_validate(friend)


@router.patch("/{friend_id}", response_model=FriendRead)
async def update_friend_endpoint(
    friend_id: int,
    payload: FriendUpdate,
    session: AsyncSession = Depends(get_db),
) -> FriendRead:
    friend = await _friend_or_404(session, friend_id)
    friend = await friend_crud.update(session, db_obj=friend, obj_in=payload)
    await session.commit()
    return FriendRead.model_validate(friend)


@router.get("/{friend_id}/global_id", response_model=FriendGlobalIDRead)
async def friend_global_id_endpoint(
    friend_id: int,
    purpose: str = Query("default"),
    session: AsyncSession = Depends(get_db),
) -> FriendGlobalIDRead:
    friend = await _friend_or_404(session, friend_id)
    gid = friend.to_global_id()
    sgid = friend.to_signed_global_id(purpose=purpose)
    return FriendGlobalIDRead(
        global_id=gid.to_string(),
        gid_param=gid.to_param(),
        signed_global_id=sgid.to_string(),
        expires_at=sgid.expires_at,
    )


@router.post("/{friend_id}/capitalize_name", response_model=JobEnqueuedResponse, status_code=202)
async def capitalize_friend_name_endpoint(
    friend_id: int,
    session: AsyncSession = Depends(get_db),
) -> JobEnqueuedResponse:
    friend = await _friend_or_404(session, friend_id)
    job = await NameCapitalizerJob.perform_later(friend)
    return JobEnqueuedResponse(
        job_id=job.job_id,
        job_class=type(job).__name__,
        queue_name=job.queue_name,
        global_id=friend.to_global_id().to_string(),
    )
