"""
Base Repository Pattern

Provides generic async data access for all repositories.
Implements the Repository pattern for clean separation between
domain logic and data access.

Two flavours:
- BaseRepository: read and insert only. Compliance tables
  (audit logs, login attempts, disclosures) derive from this so
  their rows can never be updated or deleted through the API.
- CrudRepository: adds field updates and deletes.
"""

from typing import Any, Generic, Optional, Sequence, Type, TypeVar, Union

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from haven.infrastructure.database.connection import Base

# Type variable for model types
ModelT = TypeVar("ModelT", bound=Base)

EntityId = Union[int, str]


class BaseRepository(Generic[ModelT]):
    """
    Generic base repository with async read/insert operations.

    Subclass and specify the model type for entity-specific repositories.

    Usage:
        class JournalRepository(BaseRepository[JournalModel]):
            def __init__(self, session):
                super().__init__(JournalModel, session)

        repo = JournalRepository(session)
        journal = await repo.get_by_id(journal_id)
    """

    def __init__(self, model: Type[ModelT], session: AsyncSession) -> None:
        """
        Initialize repository with model class and session.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self._model = model
        self._session = session

    async def get_by_id(self, id: EntityId) -> Optional[ModelT]:
        """
        Get entity by primary key ID.

        Args:
            id: Entity primary key

        Returns:
            Entity if found, None otherwise
        """
        result = await self._session.execute(
            select(self._model).where(self._model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_all(
        self,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[ModelT]:
        """
        Get all entities in primary key order.

        Args:
            skip: Number of records to skip
            limit: Maximum records to return, unbounded when None

        Returns:
            List of entities
        """
        query = select(self._model).order_by(self._model.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self._session.execute(query)
        return result.scalars().all()

    async def create(self, entity: ModelT) -> ModelT:
        """
        Insert a new entity.

        Args:
            entity: Entity instance to create

        Returns:
            Created entity with server-assigned ID and defaults
        """
        self._session.add(entity)
        await self._session.flush()
        await self._session.refresh(entity)
        return entity

    async def count(self) -> int:
        """
        Count all entities.

        Returns:
            Total entity count
        """
        result = await self._session.execute(
            select(func.count()).select_from(self._model)
        )
        return result.scalar_one()

    async def exists(self, id: EntityId) -> bool:
        """
        Check if entity exists by ID.

        Args:
            id: Entity primary key

        Returns:
            True if exists
        """
        result = await self._session.execute(
            select(func.count()).select_from(self._model).where(self._model.id == id)
        )
        return result.scalar_one() > 0

    async def bulk_create(self, entities: Sequence[ModelT]) -> Sequence[ModelT]:
        """
        Create multiple entities in batch.

        Args:
            entities: List of entities to create

        Returns:
            Created entities with IDs
        """
        self._session.add_all(entities)
        await self._session.flush()
        for entity in entities:
            await self._session.refresh(entity)
        return entities


class CrudRepository(BaseRepository[ModelT]):
    """Repository for mutable entities."""

    async def update(self, id: EntityId, values: dict[str, Any]) -> Optional[ModelT]:
        """
        Apply field updates to an entity.

        Keys that are not mapped attributes are ignored.

        Args:
            id: Entity primary key
            values: Attribute name to new value

        Returns:
            Updated entity, None if not found
        """
        entity = await self.get_by_id(id)
        if entity is None:
            return None

        for key, value in values.items():
            if hasattr(self._model, key) and key != "id":
                setattr(entity, key, value)

        await self._session.flush()
        await self._session.refresh(entity)
        return entity

    async def delete(self, id: EntityId) -> bool:
        """
        Delete entity by ID.

        Args:
            id: Entity primary key

        Returns:
            True if deleted, False if not found
        """
        result = await self._session.execute(
            delete(self._model).where(self._model.id == id)
        )
        return result.rowcount > 0
