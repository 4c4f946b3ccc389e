from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

JournalType = Literal["daily", "casual", "gratitude", "travel", "dream"]

# 所有实体 ID 共用的上限（SQL 后端的 INTEGER 为有符号 64 位）
MAX_ENTITY_ID = 2**63 - 1


@dataclass
class User:
    id: int
    username: str
    password: str


@dataclass
class Journal:
    id: int
    user_id: int
    title: str
    type: str
    date: datetime
    created_at: datetime
    updated_at: datetime
    content: str = ""
    folder_id: int | None = None
    tags: list[str] = field(default_factory=list)
    mood: str = ""


@dataclass
class Folder:
    id: int
    user_id: int
    name: str
    parent_id: int | None = None
