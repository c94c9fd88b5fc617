"""Infrastructure resources: relational store.

This module is part of the infra layer and must not import from application features.
"""
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str, **engine_options: Any):
        self.database_url = database_url
        self.engine_options = engine_options
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def init(self):
        """Initialize database connection."""
        options = {"echo": False, "pool_pre_ping": True}
        if not self.database_url.startswith("sqlite"):
            options["pool_recycle"] = 3600
        options.update(self.engine_options)
        self.engine = create_async_engine(self.database_url, **options)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    async def ping(self) -> None:
        """Round-trip a trivial query; raises if the store is unreachable."""
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_schema(self, metadata) -> None:
        """Create missing tables (local development and tests only)."""
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()
