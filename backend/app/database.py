from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

# Base class for models
Base = declarative_base()


def create_engine_for_url(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """创建异步引擎（SQLite / PostgreSQL 均可）。

    针对 SQLite 做一些“更像生产”的默认设置：
    - busy_timeout：降低并发写入下的 “database is locked”
    - WAL：提升并发读写能力
    """
    is_sqlite = str(database_url or "").startswith("sqlite")
    connect_args = {"timeout": 30} if is_sqlite else {}

    engine = create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        future=True,
        connect_args=connect_args,
    )

    # 只有 SQLite 才需要 PRAGMA
    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA busy_timeout=30000;")
            cursor.close()

    return engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database tables"""
    # 确保所有模型都已被导入，从而注册到 Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
