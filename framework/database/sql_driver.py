from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.logging.logger import get_logger
from .base import BaseDatabaseDriver

logger = get_logger("database")


def _engine_options(url: str, echo: bool) -> dict:
    options = {"echo": echo}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite+aiosqlite://"):
            # Single shared connection so every session sees the same in-memory DB
            options["poolclass"] = StaticPool
    return options


class SQLDriver(BaseDatabaseDriver):
    """Sync and async SQLModel engines plus their session factories."""

    def __init__(self, url: str, async_url: str, echo: bool = False):
        self.url = url
        self.async_url = async_url
        self.engine = create_engine(url, **_engine_options(url, echo))
        self.async_engine = create_async_engine(async_url, **_engine_options(async_url, echo))
        self.session_factory = sessionmaker(
            self.engine, class_=Session, expire_on_commit=False
        )
        self.async_session_factory = sessionmaker(
            self.async_engine, class_=AsyncSession, expire_on_commit=False
        )

    def connect(self):
        """Check connectivity (the engine manages connections)."""
        with self.engine.begin() as conn:
            conn.execute(text("SELECT 1"))

    async def connect_async(self):
        async with self.async_engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

    def disconnect(self):
        """Dispose connection pools."""
        self.engine.dispose()

    async def disconnect_async(self):
        await self.async_engine.dispose()

    def create_schema(self):
        # Import all models so they are registered in metadata
        import apps.models  # noqa: F401
        SQLModel.metadata.create_all(self.engine)
        logger.info(f"Schema created on {self.engine.url.render_as_string(hide_password=True)}")

    def drop_schema(self):
        import apps.models  # noqa: F401
        SQLModel.metadata.drop_all(self.engine)

    async def create_schema_async(self):
        import apps.models  # noqa: F401
        async with self.async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info(f"Schema created on {self.async_engine.url.render_as_string(hide_password=True)}")

    async def drop_schema_async(self):
        import apps.models  # noqa: F401
        async with self.async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)
