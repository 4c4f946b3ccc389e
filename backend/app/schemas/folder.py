from __future__ import annotations

from pydantic import Field

from .common import CamelModel, EntityRef


class FolderCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    parent_id: EntityRef | None = None


class FolderResponse(CamelModel):
    id: int
    user_id: int
    name: str
    parent_id: int | None
