from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """统一为带时区的 UTC 时间（SQLite 读回来的是 naive datetime，按 UTC 处理）。"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(value: str) -> datetime:
    """解析 ISO-8601 字符串（支持 `Z` 后缀）；无时区信息时按 UTC 处理。

    解析失败抛 ValueError，由调用方决定如何上报。
    """
    if not isinstance(value, str):
        raise ValueError("datetime must be an ISO-8601 string")
    s = value.strip()
    if not s:
        raise ValueError("datetime must not be empty")
    # 必须包含时间部分，避免把纯日期 "2024-01-01" 当作合法 datetime
    if "T" not in s and " " not in s:
        raise ValueError("datetime must include a time component")
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    parsed = datetime.fromisoformat(s)
    return as_utc(parsed)
