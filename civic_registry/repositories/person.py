"""Person repository — searches on top of the generic soft-delete aware CRUD."""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, or_, select

from civic_registry.domain.person import Person
from civic_registry.repositories.base import BaseRepository


class PersonRepository(BaseRepository[Person]):
    model = Person

    async def search(
        self,
        *,
        term: str | None = None,
        last_name: str | None = None,
        city: str | None = None,
        born_from: date | None = None,
        born_to: date | None = None,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        include_deleted: bool = False,
    ) -> tuple[list[Person], int]:
        """Free-text term matches first name, last name or email (case-insensitive)."""
        conditions = []
        if term:
            pattern = f"%{term.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(Person.first_name).like(pattern),
                    func.lower(Person.last_name).like(pattern),
                    func.lower(Person.email).like(pattern),
                )
            )
        if born_from is not None:
            conditions.append(Person.date_of_birth >= born_from)
        if born_to is not None:
            conditions.append(Person.date_of_birth <= born_to)

        return await self.list(
            offset=offset,
            limit=limit,
            order_by=order_by,
            order=order,
            filters={"last_name": last_name, "city": city},
            where=conditions,
            include_deleted=include_deleted,
        )

    async def count_by_city(self, city: str) -> int:
        q = select(func.count()).select_from(
            self._base_query().where(Person.city == city).subquery()
        )
        return (await self._session.execute(q)).scalar_one()
