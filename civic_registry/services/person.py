"""Person service — registry operations on top of the record lifecycle manager.

Converts request DTOs to plain field dicts and delegates every write to
:class:`~civic_registry.services.lifecycle.RecordLifecycleManager`.

Rule: No SQLAlchemy queries / no FastAPI here.
"""


import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from civic_registry.core.pagination import PaginationParams
from civic_registry.domain.audit import AuditTrail, Clock, utc_now
from civic_registry.domain.person import Person, check_birth_date
from civic_registry.repositories.audit import AuditTrailRepository
from civic_registry.repositories.person import PersonRepository
from civic_registry.schemas.person import PersonCreate, PersonPatch
from civic_registry.services.lifecycle import RecordLifecycleManager

logger = logging.getLogger(__name__)

ENTITY_NAME = "Person"


class PersonService:
    def __init__(self, session: AsyncSession, clock: Clock = utc_now):
        self._repo = PersonRepository(session)
        self._audit = AuditTrailRepository(session)
        self._clock = clock
        self._lifecycle: RecordLifecycleManager[Person] = RecordLifecycleManager(
            self._repo,
            entity_name=ENTITY_NAME,
            mutable_fields=Person.MUTABLE_FIELDS,
            mandatory_fields=Person.MANDATORY_FIELDS,
            unique_fields=Person.UNIQUE_FIELDS,
            rules=(check_birth_date,),
            clock=clock,
            audit_trail=self._audit,
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def list_persons(
        self,
        pagination: PaginationParams,
        *,
        search: str | None = None,
        last_name: str | None = None,
        city: str | None = None,
        born_from: date | None = None,
        born_to: date | None = None,
        include_deleted: bool = False,
    ) -> tuple[list[Person], int]:
        return await self._repo.search(
            term=search,
            last_name=last_name,
            city=city,
            born_from=born_from,
            born_to=born_to,
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            include_deleted=include_deleted,
        )

    async def get_person(self, person_id: str, *, include_deleted: bool = False) -> Person:
        return await self._lifecycle.get(person_id, include_deleted=include_deleted)

    async def person_history(self, person_id: str) -> list[AuditTrail]:
        await self._lifecycle.get(person_id, include_deleted=True)  # raises 404 if missing
        return await self._audit.list_for(ENTITY_NAME, person_id)

    async def count_by_city(self, city: str) -> int:
        return await self._repo.count_by_city(city)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create_person(self, data: PersonCreate, actor: str) -> Person:
        person = await self._lifecycle.create(data.model_dump(exclude_none=True), actor)
        if not person.is_adult(self._clock().date()):
            logger.warning(
                "Created person under 18: %s (age %d)",
                person.id, person.age(self._clock().date()),
            )
        return person

    async def replace_person(self, person_id: str, data: PersonCreate, actor: str) -> Person:
        return await self._lifecycle.replace(person_id, data.model_dump(), actor)

    async def update_person(self, person_id: str, data: PersonPatch, actor: str) -> Person:
        return await self._lifecycle.merge(person_id, data.model_dump(exclude_none=True), actor)

    async def delete_person(self, person_id: str, actor: str) -> None:
        await self._lifecycle.soft_delete(person_id, actor)
