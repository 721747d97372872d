"""Generic async repository with explicit soft-delete filtering and pagination."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from civic_registry.core.exceptions import ConflictError
from civic_registry.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository.

    Soft-deletes: rows with `deleted = true` are excluded from every read
    unless the caller passes ``include_deleted=True``. There is no implicit
    query filter to forget. Hard-delete is intentionally never exposed.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def _soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted")

    def _base_query(self, *, include_deleted: bool = False):
        """Return a SELECT excluding soft-deleted rows unless asked otherwise."""
        q = select(self.model)
        if self._soft_deletes and not include_deleted:
            q = q.where(self.model.deleted.is_(False))
        return q

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError(
                f"{self.model.__name__} conflicts with an existing record"
            ) from exc

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str, *, include_deleted: bool = False) -> ModelT | None:
        result = await self._session.execute(
            self._base_query(include_deleted=include_deleted).where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def find_by(
        self, field: str, value: Any, *, include_deleted: bool = False
    ) -> ModelT | None:
        """Point lookup on a single column, e.g. a uniqueness-constrained one."""
        column = getattr(self.model, field)
        result = await self._session.execute(
            self._base_query(include_deleted=include_deleted).where(column == value)
        )
        return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
        where: Iterable[Any] = (),
        include_deleted: bool = False,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional column filters."""
        q = self._base_query(include_deleted=include_deleted)

        # Apply simple equality filters
        if filters:
            for col_name, value in filters.items():
                if value is not None and hasattr(self.model, col_name):
                    q = q.where(getattr(self.model, col_name) == value)
        for condition in where:
            q = q.where(condition)

        # Count
        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        # Order + paginate
        col = self.model.__mapper__.columns.get(order_by)  # unknown or derived names are ignored
        if col is not None:
            q = q.order_by(col.desc() if order == "desc" else col.asc())
        q = q.order_by(self.model.id)
        q = q.offset(offset).limit(limit)

        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def add(self, instance: ModelT) -> ModelT:
        self._session.add(instance)
        await self._flush()  # populate id
        return instance

    async def save(self, instance: ModelT) -> ModelT:
        """Flush pending attribute changes of an already-loaded instance."""
        await self._flush()
        return instance

    async def soft_delete(self, entity_id: str, *, actor: str | None, at: datetime) -> bool:
        """Mark a live row deleted. Returns False when no live row matched."""
        result = await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.deleted.is_(False))
            .values(deleted=True, updated_at=at, updated_by=actor)
            .execution_options(synchronize_session="fetch")
        )
        await self._flush()
        return result.rowcount > 0
