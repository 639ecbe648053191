from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FriendCreate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)


class FriendUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)


class FriendRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    email: str | None
    created_at: datetime
    updated_at: datetime


class FriendListResponse(BaseModel):
    items: list[FriendRead]


class FriendGlobalIDRead(BaseModel):
    global_id: str
    gid_param: str
    signed_global_id: str
    expires_at: datetime | None


class JobEnqueuedResponse(BaseModel):
    job_id: str
    job_class: str
    queue_name: str
    global_id: str
