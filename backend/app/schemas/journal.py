from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator, model_validator

from ..storage.records import JournalType
from ..utils.dates import parse_iso_datetime
from .common import CamelModel, EntityRef

# 与 journals 表的列宽一致（PostgreSQL 会严格校验 VARCHAR 长度）
TITLE_MAX_LENGTH = 255
MOOD_MAX_LENGTH = 100


def _parse_date_field(value: Any) -> Any:
    # 只接受 ISO-8601 字符串（与前端 `new Date().toISOString()` 对齐），不接受时间戳数字
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError("date must be an ISO-8601 datetime string")
    return parse_iso_datetime(value)


class JournalCreate(CamelModel):
    """创建日记请求体"""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    type: JournalType
    date: datetime
    content: str | None = None
    folder_id: EntityRef | None = None
    tags: list[str] | None = None
    mood: str | None = Field(default=None, max_length=MOOD_MAX_LENGTH)

    @field_validator("date", mode="before")
    @classmethod
    def _date_from_iso(cls, value: Any) -> Any:
        return _parse_date_field(value)


class JournalUpdate(CamelModel):
    """局部更新请求体：所有字段可选；出现的字段仍需满足与创建时相同的格式。"""

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    type: JournalType | None = None
    date: datetime | None = None
    content: str | None = None
    folder_id: EntityRef | None = None
    tags: list[str] | None = None
    mood: str | None = Field(default=None, max_length=MOOD_MAX_LENGTH)

    @field_validator("date", mode="before")
    @classmethod
    def _date_from_iso(cls, value: Any) -> Any:
        return _parse_date_field(value)

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> "JournalUpdate":
        # folder_id / tags / mood 允许显式 null；其余字段出现时必须有值
        for name in ("title", "type", "date", "content"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self

    def changes(self) -> dict[str, Any]:
        """只返回请求里真正出现过的字段（供合并规则判断“是否出现”）。"""
        return self.model_dump(exclude_unset=True)


class JournalResponse(CamelModel):
    id: int
    user_id: int
    title: str
    content: str
    type: str
    folder_id: int | None
    tags: list[str]
    mood: str
    date: datetime
    created_at: datetime
    updated_at: datetime
