"""Database initialization script (STORAGE_BACKEND=sql)"""
import asyncio

from app.config import settings
from app.database import create_engine_for_url, init_db


async def main():
    """Create tables at DATABASE_URL / SQLITE_DB_PATH"""
    print(f"Initializing database... ({settings.database_url})")
    engine = create_engine_for_url(settings.database_url or "", echo=settings.sql_echo)
    try:
        await init_db(engine)
    finally:
        await engine.dispose()
    print("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(main())
