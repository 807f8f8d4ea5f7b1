# eventboard/core/database.py
from typing import AsyncGenerator
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from eventboard.core.config import settings


class DatabaseHelper:
    """Owns the engine and hands out one session per request"""

    def __init__(self, url: str, echo: bool = False, pool_size: int = 5, max_overflow: int = 10):
        engine_kwargs = {"echo": echo}
        # SQLite pools do not accept sizing arguments
        if not url.startswith("sqlite"):
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow, pool_pre_ping=True)

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    async def ping(self) -> int:
        """Round trip to the database, raises if it is unreachable"""
        async with self.session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar()

    async def dispose(self):
        await self.engine.dispose()

    async def session_getter(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            yield session


db_helper = DatabaseHelper(
    url=settings.db.DATABASE_URL,
    echo=settings.db.DB_ECHO,
    pool_size=settings.db.DB_POOL_SIZE,
    max_overflow=settings.db.DB_MAX_OVERFLOW,
)
