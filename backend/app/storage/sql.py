from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .. import models
from ..database import make_session_factory
from ..utils.dates import as_utc
from .base import Storage
from .errors import EntityNotFoundError
from .merge import apply_journal_defaults, merge_journal_update
from .records import MAX_ENTITY_ID, Folder, Journal, User

logger = logging.getLogger(__name__)


def _storable_id(entity_id: int) -> bool:
    # 超出 INTEGER 范围的 ID 不可能存在，按“不存在”处理
    return 0 < entity_id <= MAX_ENTITY_ID


def _to_user(row: models.User) -> User:
    return User(id=row.id, username=row.username, password=row.password)


def _to_journal(row: models.Journal) -> Journal:
    return Journal(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        type=row.type,
        content=row.content or "",
        folder_id=row.folder_id,
        tags=list(row.tags or []),
        mood=row.mood or "",
        date=as_utc(row.date),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _to_folder(row: models.Folder) -> Folder:
    return Folder(id=row.id, user_id=row.user_id, name=row.name, parent_id=row.parent_id)


def _write_journal(row: models.Journal, journal: Journal) -> None:
    row.title = journal.title
    row.content = journal.content
    row.type = journal.type
    row.folder_id = journal.folder_id
    row.tags = list(journal.tags)
    row.mood = journal.mood
    row.date = journal.date
    row.updated_at = journal.updated_at


class SqlStorage(Storage):
    """基于 SQLAlchemy 异步会话的存储实现。

    ID 统一从 `entity_ids` 表分配，保证与内存实现一致的“跨实体类型全局唯一”。
    """

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        owns_engine: bool = False,
    ) -> None:
        self.engine = engine
        self._session_factory = session_factory or make_session_factory(engine)
        self._owns_engine = owns_engine

    async def _next_id(self, session: AsyncSession, kind: str) -> int:
        allocation = models.EntityId(kind=kind)
        session.add(allocation)
        await session.flush()
        return int(allocation.id)

    async def create_user(self, data: Mapping[str, Any]) -> User:
        async with self._session_factory() as session:
            row = models.User(
                id=await self._next_id(session, "user"),
                username=data["username"],
                password=data["password"],
            )
            session.add(row)
            await session.commit()
            logger.debug("[STORAGE] created user id=%s", row.id)
            return _to_user(row)

    async def get_user(self, user_id: int) -> User | None:
        if not _storable_id(user_id):
            return None
        async with self._session_factory() as session:
            row = await session.get(models.User, user_id)
            return _to_user(row) if row else None

    async def get_user_by_username(self, username: str) -> User | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(models.User).where(models.User.username == username).order_by(models.User.id).limit(1)
            )
            row = result.scalar_one_or_none()
            return _to_user(row) if row else None

    async def update_user_password(self, user_id: int, password: str) -> User:
        if not _storable_id(user_id):
            raise EntityNotFoundError("user", user_id)
        async with self._session_factory() as session:
            row = await session.get(models.User, user_id)
            if row is None:
                raise EntityNotFoundError("user", user_id)
            row.password = password
            await session.commit()
            return _to_user(row)

    async def create_journal(self, owner_id: int, data: Mapping[str, Any]) -> Journal:
        async with self._session_factory() as session:
            journal = apply_journal_defaults(await self._next_id(session, "journal"), owner_id, data)
            row = models.Journal(
                id=journal.id,
                user_id=journal.user_id,
                created_at=journal.created_at,
            )
            _write_journal(row, journal)
            session.add(row)
            await session.commit()
            logger.debug("[STORAGE] created journal id=%s owner=%s", journal.id, owner_id)
            return journal

    async def get_journal(self, journal_id: int) -> Journal | None:
        if not _storable_id(journal_id):
            return None
        async with self._session_factory() as session:
            row = await session.get(models.Journal, journal_id)
            return _to_journal(row) if row else None

    async def update_journal(self, journal_id: int, changes: Mapping[str, Any]) -> Journal:
        if not _storable_id(journal_id):
            raise EntityNotFoundError("journal", journal_id)
        async with self._session_factory() as session:
            row = await session.get(models.Journal, journal_id)
            if row is None:
                raise EntityNotFoundError("journal", journal_id)
            updated = merge_journal_update(_to_journal(row), changes)
            _write_journal(row, updated)
            await session.commit()
            return updated

    async def delete_journal(self, journal_id: int) -> None:
        if not _storable_id(journal_id):
            return
        async with self._session_factory() as session:
            row = await session.get(models.Journal, journal_id)
            if row is None:
                return
            await session.delete(row)
            await session.commit()

    async def get_user_journals(self, owner_id: int) -> list[Journal]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(models.Journal)
                .where(models.Journal.user_id == owner_id)
                .order_by(models.Journal.id.asc())
            )
            return [_to_journal(row) for row in result.scalars().all()]

    async def create_folder(self, owner_id: int, data: Mapping[str, Any]) -> Folder:
        async with self._session_factory() as session:
            row = models.Folder(
                id=await self._next_id(session, "folder"),
                user_id=owner_id,
                name=data["name"],
                parent_id=data.get("parent_id"),
            )
            session.add(row)
            await session.commit()
            return _to_folder(row)

    async def get_folder(self, folder_id: int) -> Folder | None:
        if not _storable_id(folder_id):
            return None
        async with self._session_factory() as session:
            row = await session.get(models.Folder, folder_id)
            return _to_folder(row) if row else None

    async def get_user_folders(self, owner_id: int) -> list[Folder]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(models.Folder)
                .where(models.Folder.user_id == owner_id)
                .order_by(models.Folder.id.asc())
            )
            return [_to_folder(row) for row in result.scalars().all()]

    async def close(self) -> None:
        if self._owns_engine:
            await self.engine.dispose()
