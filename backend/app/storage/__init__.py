from __future__ import annotations

import logging

from ..config import Settings
from ..database import create_engine_for_url, init_db
from .base import Storage
from .errors import EntityNotFoundError, StorageError
from .memory import MemoryStorage
from .merge import apply_journal_defaults, merge_journal_update
from .records import MAX_ENTITY_ID, Folder, Journal, JournalType, User
from .sql import SqlStorage

logger = logging.getLogger(__name__)


async def build_storage(config: Settings) -> Storage:
    """按配置构造存储实例（由应用启动时调用一次）。"""
    if config.storage_backend == "sql":
        engine = create_engine_for_url(config.database_url or "", echo=config.sql_echo)
        await init_db(engine)
        logger.info("[STORAGE] Using SQL backend: %s", engine.url.render_as_string(hide_password=True))
        return SqlStorage(engine, owns_engine=True)

    logger.info("[STORAGE] Using in-memory backend (data is lost on restart)")
    return MemoryStorage()


__all__ = [
    "MAX_ENTITY_ID",
    "EntityNotFoundError",
    "Folder",
    "Journal",
    "JournalType",
    "MemoryStorage",
    "SqlStorage",
    "Storage",
    "StorageError",
    "User",
    "apply_journal_defaults",
    "build_storage",
    "merge_journal_update",
]
