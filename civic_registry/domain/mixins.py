"""Reusable SQLAlchemy column mixins."""

from __future__ import annotations

from datetime import datetime

from typing import Optional

from sqlalchemy import Boolean, DateTime, String, false, func
from sqlalchemy.orm import Mapped, mapped_column

from civic_registry.domain.audit import AuditMetadata, utc_now


class TimestampMixin:
    """Adds created_at, updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now(),
        nullable=False,
    )


class AuditColumnsMixin:
    """Stores an embedded AuditMetadata value as five columns.

    The columns are written only through the ``audit`` property; there are no
    ORM-side defaults or onupdate hooks, the lifecycle manager stamps them.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    deleted: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False, index=True
    )

    @property
    def audit(self) -> AuditMetadata:
        return AuditMetadata(
            created_at=self.created_at,
            updated_at=self.updated_at,
            created_by=self.created_by,
            updated_by=self.updated_by,
            deleted=bool(self.deleted),
        )

    @audit.setter
    def audit(self, value: AuditMetadata) -> None:
        if self.created_at is not None and value.created_at != self.created_at:
            raise ValueError("created_at is immutable once set")
        if self.created_by is not None and value.created_by != self.created_by:
            raise ValueError("created_by is immutable once set")
        self.created_at = value.created_at
        self.updated_at = value.updated_at
        self.created_by = value.created_by
        self.updated_by = value.updated_by
        self.deleted = value.deleted
