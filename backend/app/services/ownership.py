from __future__ import annotations

from typing import Protocol, TypeVar

from ..storage.errors import EntityNotFoundError


class Owned(Protocol):
    id: int
    user_id: int


T = TypeVar("T", bound=Owned)


def ensure_owned(entity: T | None, caller_id: int, *, kind: str = "journal") -> T:
    """只允许所有者访问：不存在和“属于别人”一律按不存在处理（不泄露他人数据是否存在）。"""
    if entity is None or entity.user_id != caller_id:
        raise EntityNotFoundError(kind, getattr(entity, "id", None))
    return entity
