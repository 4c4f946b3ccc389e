"""Journal 字段合并规则（创建时补默认值 / 局部更新时按字段合并）。

局部更新规则：
- title / content / type / folder_id / date：payload 里出现即替换（folder_id 允许显式置空）
- tags / mood：只有出现且为真值才替换；`[]`、`""`、`None` 一律保留原值
  （历史行为：没有办法通过更新把标签/心情清空，保留以兼容现有客户端）
- updated_at：每次合并都刷新，且不早于原值
- id / user_id / created_at：永不从 payload 读取
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..utils.dates import as_utc, parse_iso_datetime, utcnow
from .records import Journal

REPLACE_IF_PRESENT = ("title", "content", "type", "folder_id", "date")
REPLACE_IF_TRUTHY = ("tags", "mood")


def _coerce_date(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    return parse_iso_datetime(value)


def apply_journal_defaults(
    journal_id: int,
    owner_id: int,
    data: Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> Journal:
    """根据创建 payload 生成一条完整的 Journal 记录。"""
    now = now or utcnow()
    raw_date = data.get("date")
    tags = data.get("tags") or []
    return Journal(
        id=journal_id,
        user_id=owner_id,
        title=data["title"],
        type=data["type"],
        content=data.get("content") or "",
        folder_id=data.get("folder_id"),
        tags=list(tags),
        mood=data.get("mood") or "",
        date=_coerce_date(raw_date) if raw_date else now,
        created_at=now,
        updated_at=now,
    )


def merge_journal_update(
    existing: Journal,
    changes: Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> Journal:
    """把局部更新合并到已有记录上，返回新的记录对象（不修改 existing）。"""
    now = now or utcnow()
    updates: dict[str, Any] = {}

    for name in REPLACE_IF_PRESENT:
        if name in changes:
            updates[name] = changes[name]

    for name in REPLACE_IF_TRUTHY:
        value = changes.get(name)
        if value:
            updates[name] = value

    if "date" in updates:
        updates["date"] = _coerce_date(updates["date"])
    if "content" in updates and updates["content"] is None:
        updates["content"] = ""
    if "tags" in updates:
        updates["tags"] = list(updates["tags"])

    updates["updated_at"] = max(now, existing.updated_at)
    merged = replace(existing, **updates)
    merged.tags = list(merged.tags)
    return merged
