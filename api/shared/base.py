"""Base repository with the CRUD operations shared by feature repositories."""
from abc import ABC
from typing import Any, Generic, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.entities.base import BaseEntity

T = TypeVar("T", bound=BaseEntity)


class BaseRepository(ABC, Generic[T]):
    """Session-bound repository. Never commits; the caller owns the transaction."""

    model: Type[T]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entity: T) -> T:
        """Add a new entity and flush so defaults (id, timestamps) are assigned."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def delete(self, entity_id: str) -> bool:
        """Delete entity by ID. Returns whether a row was removed."""
        stmt = delete(self.model).where(self.model.id == entity_id)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def delete_by_field(self, field_name: str, value: Any) -> int:
        """Delete entities by field value."""
        field = getattr(self.model, field_name)
        stmt = delete(self.model).where(field == value)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def count(self, **filters: Any) -> int:
        """Count entities with filters."""
        stmt = select(func.count(self.model.id))

        for field_name, value in filters.items():
            if hasattr(self.model, field_name) and value is not None:
                field = getattr(self.model, field_name)
                stmt = stmt.where(field == value)

        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)
