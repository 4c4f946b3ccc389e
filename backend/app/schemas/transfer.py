from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from .common import CamelModel, EntityRef
from .folder import FolderCreate, FolderResponse
from .journal import JournalCreate, JournalResponse

EXPORT_FORMAT_VERSION = 1


class ExportDocument(CamelModel):
    """导出文件格式：文件夹 + 日记（与导入格式互通）"""
    version: int = EXPORT_FORMAT_VERSION
    exported_at: datetime
    folders: list[FolderResponse] = Field(default_factory=list)
    journals: list[JournalResponse] = Field(default_factory=list)


class ImportFolder(FolderCreate):
    # 导出文件里的原 id，仅用于重映射 parentId / folderId
    id: EntityRef | None = None


class ImportJournal(JournalCreate):
    pass


class ImportDocument(CamelModel):
    folders: list[ImportFolder] = Field(default_factory=list)
    journals: list[ImportJournal] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        # 兼容旧版前端直接导出的“日记数组”
        if isinstance(data, list):
            return {"journals": data}
        return data


class ImportResult(CamelModel):
    imported: int = 0
    folders: list[FolderResponse] = Field(default_factory=list)
    journals: list[JournalResponse] = Field(default_factory=list)
