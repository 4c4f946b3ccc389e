from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from .base import Storage
from .errors import EntityNotFoundError
from .merge import apply_journal_defaults, merge_journal_update
from .records import Folder, Journal, User

logger = logging.getLogger(__name__)


def _copy_journal(journal: Journal) -> Journal:
    # tags 是可变列表，对外返回副本，避免调用方改到存储里的对象
    return replace(journal, tags=list(journal.tags))


class MemoryStorage(Storage):
    """进程内存储：三张 dict + 一个共享自增计数器。

    每个操作在单次请求内同步完成（中间没有 await 点），单线程事件循环下无需加锁。
    """

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._journals: dict[int, Journal] = {}
        self._folders: dict[int, Folder] = {}
        self._current_id = 1

    def _next_id(self) -> int:
        entity_id = self._current_id
        self._current_id += 1
        return entity_id

    async def create_user(self, data: Mapping[str, Any]) -> User:
        user = User(id=self._next_id(), username=data["username"], password=data["password"])
        self._users[user.id] = user
        logger.debug("[STORAGE] created user id=%s", user.id)
        return replace(user)

    async def get_user(self, user_id: int) -> User | None:
        user = self._users.get(user_id)
        return replace(user) if user else None

    async def get_user_by_username(self, username: str) -> User | None:
        for user in self._users.values():
            if user.username == username:
                return replace(user)
        return None

    async def update_user_password(self, user_id: int, password: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise EntityNotFoundError("user", user_id)
        updated = replace(user, password=password)
        self._users[user_id] = updated
        return replace(updated)

    async def create_journal(self, owner_id: int, data: Mapping[str, Any]) -> Journal:
        journal = apply_journal_defaults(self._next_id(), owner_id, data)
        self._journals[journal.id] = journal
        logger.debug("[STORAGE] created journal id=%s owner=%s", journal.id, owner_id)
        return _copy_journal(journal)

    async def get_journal(self, journal_id: int) -> Journal | None:
        journal = self._journals.get(journal_id)
        return _copy_journal(journal) if journal else None

    async def update_journal(self, journal_id: int, changes: Mapping[str, Any]) -> Journal:
        existing = self._journals.get(journal_id)
        if existing is None:
            raise EntityNotFoundError("journal", journal_id)
        updated = merge_journal_update(existing, changes)
        self._journals[journal_id] = updated
        return _copy_journal(updated)

    async def delete_journal(self, journal_id: int) -> None:
        self._journals.pop(journal_id, None)

    async def get_user_journals(self, owner_id: int) -> list[Journal]:
        return [_copy_journal(j) for j in self._journals.values() if j.user_id == owner_id]

    async def create_folder(self, owner_id: int, data: Mapping[str, Any]) -> Folder:
        folder = Folder(
            id=self._next_id(),
            user_id=owner_id,
            name=data["name"],
            parent_id=data.get("parent_id"),
        )
        self._folders[folder.id] = folder
        return replace(folder)

    async def get_folder(self, folder_id: int) -> Folder | None:
        folder = self._folders.get(folder_id)
        return replace(folder) if folder else None

    async def get_user_folders(self, owner_id: int) -> list[Folder]:
        return [replace(f) for f in self._folders.values() if f.user_id == owner_id]
