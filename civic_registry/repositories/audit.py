"""Append-only access to the audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select

from civic_registry.domain.audit import AuditTrail, utc_now
from civic_registry.repositories.base import BaseRepository


class AuditTrailRepository(BaseRepository[AuditTrail]):
    model = AuditTrail

    async def record(
        self,
        *,
        action: str,
        entity_type: str,
        entity_id: str,
        actor: str | None,
        old_value: dict[str, Any] | None = None,
        new_value: dict[str, Any] | None = None,
        description: str | None = None,
        at: datetime | None = None,
    ) -> AuditTrail:
        return await self.add(
            AuditTrail(
                created_at=at or utc_now(),
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                actor=actor,
                old_value=old_value,
                new_value=new_value,
                description=description,
            )
        )

    async def list_for(self, entity_type: str, entity_id: str) -> list[AuditTrail]:
        """All rows for one record, oldest first."""
        result = await self._session.execute(
            select(AuditTrail)
            .where(AuditTrail.entity_type == entity_type)
            .where(AuditTrail.entity_id == entity_id)
            .order_by(AuditTrail.created_at.asc(), AuditTrail.id.asc())
        )
        return list(result.scalars().all())
