from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from .records import Folder, Journal, User


class Storage(ABC):
    """实体存储接口：users / journals / folders 的增删改查。

    - 所有 ID 由存储层分配，三类实体共用同一个递增序列（全局唯一）
    - 用户名唯一性由调用方先查后建保证，存储层本身不拒绝重复
    - journals 的局部更新遵循 `merge.merge_journal_update`
    """

    # Users
    @abstractmethod
    async def create_user(self, data: Mapping[str, Any]) -> User: ...

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    async def update_user_password(self, user_id: int, password: str) -> User:
        """Raises EntityNotFoundError when the user does not exist."""

    # Journals
    @abstractmethod
    async def create_journal(self, owner_id: int, data: Mapping[str, Any]) -> Journal: ...

    @abstractmethod
    async def get_journal(self, journal_id: int) -> Journal | None: ...

    @abstractmethod
    async def update_journal(self, journal_id: int, changes: Mapping[str, Any]) -> Journal:
        """Raises EntityNotFoundError when no journal exists at journal_id."""

    @abstractmethod
    async def delete_journal(self, journal_id: int) -> None:
        """Deleting an absent id is a no-op."""

    @abstractmethod
    async def get_user_journals(self, owner_id: int) -> list[Journal]: ...

    # Folders
    @abstractmethod
    async def create_folder(self, owner_id: int, data: Mapping[str, Any]) -> Folder: ...

    @abstractmethod
    async def get_folder(self, folder_id: int) -> Folder | None: ...

    @abstractmethod
    async def get_user_folders(self, owner_id: int) -> list[Folder]: ...

    async def close(self) -> None:
        """释放底层资源（默认无事可做）。"""
        return None
