"""Shared database dependencies for FastAPI routers."""
from typing import Any, AsyncGenerator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.di.container import ApplicationContainer
from infra.resources import DatabaseResource


@inject
async def get_db_session(
    db: DatabaseResource = Depends(
        Provide[ApplicationContainer.infrastructure.database]
    ),
) -> AsyncGenerator[AsyncSession, Any]:
    """Yield an AsyncSession per-request and ensure proper close.

    Closing a session with an open transaction rolls it back, so a request
    cancelled mid-flight leaves no partial writes behind.
    """
    session = db.get_session()
    try:
        yield session
    finally:
        await session.close()
