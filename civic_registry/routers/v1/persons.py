"""Person registry router — /api/v1/persons.

Reads need any authenticated principal; writes need OFFICER or ADMIN; the
audit history and ``includeDeleted`` listing are ADMIN only. The actor stamped
into audit fields is always the authenticated principal's email.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from civic_registry.core.exceptions import ForbiddenError
from civic_registry.core.pagination import PaginationParams
from civic_registry.core.response import DataResponse, ListResponse, paginated
from civic_registry.core.security import AuthenticatedPrincipal
from civic_registry.db.base import get_db
from civic_registry.domain.user import UserRole
from civic_registry.routers.deps import get_current_principal, require_admin, require_writer
from civic_registry.schemas.person import (
    AuditEntryOut,
    CountOut,
    PersonCreate,
    PersonOut,
    PersonPatch,
)
from civic_registry.services.person import PersonService

router = APIRouter(prefix="/persons", tags=["Persons"])


def _svc(session: AsyncSession) -> PersonService:
    return PersonService(session)


# ------------------------------------------------------------------
# Read
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[PersonOut])
async def list_persons(
    q: Optional[str] = Query(default=None, description="Matches first name, last name or email"),
    last_name: Optional[str] = Query(default=None, alias="lastName"),
    city: Optional[str] = Query(default=None),
    born_from: Optional[date] = Query(default=None, alias="bornFrom"),
    born_to: Optional[date] = Query(default=None, alias="bornTo"),
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
    pagination: PaginationParams = Depends(),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """List persons (paginated, newest first by default)."""
    if include_deleted and principal.role != UserRole.ADMIN.value:
        raise ForbiddenError("Only administrators may list deleted persons")
    items, total = await _svc(session).list_persons(
        pagination,
        search=q,
        last_name=last_name,
        city=city,
        born_from=born_from,
        born_to=born_to,
        include_deleted=include_deleted,
    )
    return paginated([PersonOut.model_validate(p) for p in items], total, pagination)


@router.get("/count", response_model=DataResponse[CountOut])
async def count_persons_in_city(
    city: str = Query(min_length=1),
    _: AuthenticatedPrincipal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    count = await _svc(session).count_by_city(city)
    return {"data": CountOut(count=count)}


@router.get("/{person_id}", response_model=DataResponse[PersonOut])
async def get_person(
    person_id: str,
    _: AuthenticatedPrincipal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    person = await _svc(session).get_person(person_id)
    return {"data": PersonOut.model_validate(person)}


@router.get("/{person_id}/history", response_model=DataResponse[list[AuditEntryOut]])
async def get_person_history(
    person_id: str,
    _: AuthenticatedPrincipal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    """Audit trail of a person, oldest first. Includes deleted persons."""
    entries = await _svc(session).person_history(person_id)
    return {"data": [AuditEntryOut.model_validate(e) for e in entries]}


# ------------------------------------------------------------------
# Write
# ------------------------------------------------------------------

@router.post("", response_model=DataResponse[PersonOut], status_code=status.HTTP_201_CREATED)
async def create_person(
    body: PersonCreate,
    principal: AuthenticatedPrincipal = Depends(require_writer),
    session: AsyncSession = Depends(get_db),
):
    person = await _svc(session).create_person(body, principal.actor)
    return {"data": PersonOut.model_validate(person)}


@router.put("/{person_id}", response_model=DataResponse[PersonOut])
async def replace_person(
    person_id: str,
    body: PersonCreate,
    principal: AuthenticatedPrincipal = Depends(require_writer),
    session: AsyncSession = Depends(get_db),
):
    """Full replace: fields omitted from the body are cleared."""
    person = await _svc(session).replace_person(person_id, body, principal.actor)
    return {"data": PersonOut.model_validate(person)}


@router.patch("/{person_id}", response_model=DataResponse[PersonOut])
async def update_person(
    person_id: str,
    body: PersonPatch,
    principal: AuthenticatedPrincipal = Depends(require_writer),
    session: AsyncSession = Depends(get_db),
):
    """Partial update: omitted or null fields keep their stored value."""
    person = await _svc(session).update_person(person_id, body, principal.actor)
    return {"data": PersonOut.model_validate(person)}


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person(
    person_id: str,
    principal: AuthenticatedPrincipal = Depends(require_writer),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session).delete_person(person_id, principal.actor)
