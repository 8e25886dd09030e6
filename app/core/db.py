import logging
from collections.abc import AsyncIterator
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from .config import settings
from .base import Base

log = logging.getLogger(__name__)

class Database:
    """Process-wide database handle: opened at startup, disposed at shutdown."""

    def __init__(self, dsn: str, *, manage: str = "migrations", **engine_kwargs):
        self.dsn = dsn
        self.manage = manage
        self.engine_kwargs = engine_kwargs
        self.engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    async def connect(self) -> None:
        if self.engine is not None:
            return
        self.engine = create_async_engine(self.dsn, pool_pre_ping=True, **self.engine_kwargs)
        self._sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)
        ## In dev-only "create_all" mode create tables on boot; otherwise migrations own the schema.
        if self.manage == "create_all":
            # model modules must be imported so their tables are registered on Base.metadata
            import app.models  # noqa: F401
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        log.info("Database connected (manage=%s)", self.manage)

    async def close(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self._sessionmaker = None
        log.info("Database connection pool closed")

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected")
        return self._sessionmaker()

def database_from_settings() -> Database:
    return Database(settings.DATABASE_URL, manage=settings.DB_MANAGE)

async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    db: Database = request.app.state.db
    async with db.session() as session:
        yield session
