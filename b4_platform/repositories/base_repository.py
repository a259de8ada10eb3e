from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Sequence
from uuid import UUID
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from b4_platform.utils.logging import get_logger

# Define a generic type for SQLAlchemy models
ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing common CRUD operations.

    Write methods flush but never commit: the calling service owns the
    transaction, so a multi-step review decision lands atomically.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        """Add equality (or IN, for list/tuple/set values) clauses to a query."""
        if not filters:
            return query
        for field, value in filters.items():
            if not hasattr(self.model, field):
                continue
            column = getattr(self.model, field)
            if isinstance(value, (list, tuple, set)):
                query = query.where(column.in_(list(value)))
            else:
                query = query.where(column == value)
        return query

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a record by its ID.

        Args:
            id: The UUID of the record

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by ID {id}: {str(e)}",
                exc_info=True
            )
            raise

    async def get_one(self, **filters) -> Optional[ModelType]:
        """Get the single record matching all given field values.

        Returns:
            The record if found, None otherwise
        """
        try:
            query = self._apply_filters(select(self.model), filters)
            result = await self.session.execute(query.limit(1))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by {filters}: {str(e)}",
                exc_info=True
            )
            raise

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 200,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Sequence[Any]] = None,
    ) -> List[ModelType]:
        """Get all records with optional pagination, filtering and ordering.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            filters: Dictionary of field_name: value to filter by
            order_by: Column expressions to order by

        Returns:
            List of records
        """
        try:
            query = self._apply_filters(select(self.model), filters)

            if order_by:
                query = query.order_by(*order_by)

            query = query.offset(skip).limit(limit)
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving all {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise

    async def create(self, **kwargs) -> ModelType:
        """Create a new record.

        Args:
            **kwargs: Fields and values for the new record

        Returns:
            The created record
        """
        try:
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise

    async def upsert_by_key(self, key: Dict[str, Any], **fields) -> ModelType:
        """Insert or update the row identified by a unique key in one statement.

        ``key`` must name the columns of a unique constraint. Concurrent
        writers of the same key both succeed and the last write wins.

        Args:
            key: Unique-key column values
            **fields: Columns written on insert and on conflict

        Returns:
            The stored record, refreshed from the database
        """
        values = {**key, **fields}
        changes = dict(fields)
        if changes and hasattr(self.model, "updated_at"):
            changes["updated_at"] = func.now()
        try:
            stmt = insert(self.model).values(**values)
            if changes:
                stmt = stmt.on_conflict_do_update(index_elements=list(key), set_=changes)
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=list(key))
                await self.session.execute(stmt)
                return await self.get_one(**key)

            stmt = stmt.returning(self.model).execution_options(populate_existing=True)
            result = await self.session.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error upserting {self.model.__name__} by {key}: {str(e)}",
                exc_info=True
            )
            raise

    async def get_or_create(self, key: Dict[str, Any], **defaults) -> ModelType:
        """Return the row for a unique key, inserting it with defaults if missing.

        A concurrent insert of the same key is absorbed by ``ON CONFLICT DO
        NOTHING``; the existing row is returned unchanged.
        """
        existing = await self.get_one(**key)
        if existing is not None:
            return existing
        try:
            stmt = insert(self.model).values(**key, **defaults).on_conflict_do_nothing(
                index_elements=list(key)
            )
            await self.session.execute(stmt)
            return await self.get_one(**key)
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {self.model.__name__} for {key}: {str(e)}",
                exc_info=True
            )
            raise

    async def update_instance(self, instance: ModelType, **kwargs) -> ModelType:
        """Apply field changes to an already loaded record."""
        try:
            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)

            if hasattr(instance, "updated_at"):
                setattr(instance, "updated_at", datetime.now(timezone.utc))

            await self.session.flush()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error updating {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise

    async def update(self, id: UUID, **kwargs) -> Optional[ModelType]:
        """Update an existing record.

        Args:
            id: The UUID of the record to update
            **kwargs: Fields and values to update

        Returns:
            The updated record if found, None otherwise
        """
        instance = await self.get_by_id(id)
        if not instance:
            return None
        return await self.update_instance(instance, **kwargs)

    async def delete(self, id: UUID) -> bool:
        """Delete a record by ID.

        Args:
            id: The UUID of the record to delete

        Returns:
            True if deleted, False if not found
        """
        try:
            instance = await self.get_by_id(id)
            if not instance:
                return False

            await self.session.delete(instance)
            await self.session.flush()
            return True
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error deleting {self.model.__name__} {id}: {str(e)}",
                exc_info=True
            )
            raise

    async def delete_where(self, **filters) -> int:
        """Bulk delete records matching the given field values.

        Returns:
            Number of deleted rows
        """
        if not filters:
            raise ValueError("delete_where requires at least one filter")
        try:
            stmt = delete(self.model)
            for field, value in filters.items():
                stmt = stmt.where(getattr(self.model, field) == value)
            result = await self.session.execute(stmt)
            return result.rowcount or 0
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error deleting {self.model.__name__} by {filters}: {str(e)}",
                exc_info=True
            )
            raise

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count records matching filters.

        Args:
            filters: Dictionary of field_name: value to filter by

        Returns:
            Count of matching records
        """
        try:
            query = self._apply_filters(select(func.count()).select_from(self.model), filters)
            result = await self.session.execute(query)
            return result.scalar_one()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error counting {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise
