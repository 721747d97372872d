"""Audit metadata value type and the immutable audit trail model."""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import DateTime, JSON, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from civic_registry.db.base import Base

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclasses.dataclass(frozen=True)
class AuditMetadata:
    """Who wrote a record, when, and whether it is logically deleted."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    deleted: bool = False

    @classmethod
    def created(cls, actor: str, now: datetime) -> AuditMetadata:
        return cls(
            created_at=now,
            updated_at=now,
            created_by=actor,
            updated_by=actor,
            deleted=False,
        )

    def touched(self, actor: str, now: datetime) -> AuditMetadata:
        return dataclasses.replace(self, updated_at=now, updated_by=actor)

    def marked_deleted(self, actor: str, now: datetime) -> AuditMetadata:
        return dataclasses.replace(self.touched(actor, now), deleted=True)


class Auditable(Protocol):
    """Anything with a storage key and embedded AuditMetadata."""

    id: Any

    @property
    def audit(self) -> AuditMetadata: ...

    @audit.setter
    def audit(self, value: AuditMetadata) -> None: ...


class AuditTrail(Base):
    __tablename__ = "audit_trail"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Who
    actor: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)

    # What
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)

    # Change data
    old_value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    new_value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # When (no updated_at or deleted flag: audit rows are immutable)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
