"""Async engine and session factory."""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from maintenance_engine.core.config import Settings, settings as default_settings
from maintenance_engine.db.base import Base


def create_engine(config: Settings | None = None, *, url: str | None = None) -> AsyncEngine:
    config = config or default_settings
    database_url = url or config.DATABASE_URL
    connect_args = {}
    if make_url(database_url).get_backend_name().startswith("postgresql"):
        connect_args["server_settings"] = {"timezone": "utc"}
    return create_async_engine(
        database_url,
        echo=config.DATABASE_ECHO,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, autoflush=False, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all maintenance tables that do not exist yet."""
    # Register models on Base.metadata
    from maintenance_engine.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
