"""Record lifecycle manager — write-side invariants for audited records.

Generic over any model that satisfies :class:`~civic_registry.domain.audit.Auditable`
and is served by a :class:`~civic_registry.repositories.base.BaseRepository`.

Every operation:
  1. validates the candidate (known fields, mandatory fields, business rules)
  2. checks uniqueness against other live records
  3. mutates and stamps AuditMetadata with the explicit ``actor``
  4. persists and appends an audit trail row

Steps 1-2 raise before anything is written, and the caller's session is the
transaction boundary, so a failed operation leaves no partial state.

Rule: No FastAPI here. The actor is always passed in, never read from
ambient request state.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any, Generic, TypeVar

from civic_registry.core.exceptions import DuplicateError, NotFoundError, ValidationError
from civic_registry.domain.audit import AuditMetadata, Clock, utc_now
from civic_registry.repositories.audit import AuditTrailRepository
from civic_registry.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

Rule = Callable[[Mapping[str, Any], datetime], None]

ACTION_CREATE = "CREATE"
ACTION_UPDATE = "UPDATE"
ACTION_DELETE = "DELETE"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _json_safe(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class RecordLifecycleManager(Generic[RecordT]):
    """Create / replace / merge / soft-delete with uniqueness and audit stamping."""

    def __init__(
        self,
        repository: BaseRepository,
        *,
        entity_name: str,
        mutable_fields: Iterable[str],
        mandatory_fields: Iterable[str] = (),
        unique_fields: Iterable[str] = (),
        rules: Iterable[Rule] = (),
        clock: Clock = utc_now,
        audit_trail: AuditTrailRepository | None = None,
    ):
        self._repo = repository
        self._entity_name = entity_name
        self._mutable_fields = tuple(mutable_fields)
        self._mandatory_fields = tuple(mandatory_fields)
        self._unique_fields = tuple(unique_fields)
        self._rules = tuple(rules)
        self._clock = clock
        self._audit_trail = audit_trail

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, key: str, *, include_deleted: bool = False) -> RecordT:
        record = await self._repo.get_by_id(key, include_deleted=include_deleted)
        if record is None:
            raise NotFoundError(self._entity_name, key)
        return record

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, values: Mapping[str, Any], actor: str) -> RecordT:
        now = self._clock()
        candidate = {k: v for k, v in self._known(values).items() if v is not None}
        self._require_mandatory(candidate)
        self._apply_rules(candidate, now)
        await self._ensure_unique(candidate)

        record = self._repo.model(**candidate)
        record.audit = AuditMetadata.created(actor, now)
        await self._repo.add(record)

        await self._trail(ACTION_CREATE, record, actor, now, old=None, new=self._snapshot(record))
        logger.info("%s %s created by %s", self._entity_name, record.id, actor)
        return record

    async def replace(self, key: str, values: Mapping[str, Any], actor: str) -> RecordT:
        """Full replace: every mutable field takes the candidate's value, absent ones become None."""
        record = await self.get(key)
        now = self._clock()
        known = self._known(values)
        candidate = {field: known.get(field) for field in self._mutable_fields}
        self._require_mandatory(candidate)
        self._apply_rules(candidate, now)
        await self._ensure_unique(candidate, current=record)

        before = self._snapshot(record)
        for field, value in candidate.items():
            setattr(record, field, value)
        record.audit = record.audit.touched(actor, now)
        await self._repo.save(record)

        await self._trail(ACTION_UPDATE, record, actor, now, old=before, new=self._snapshot(record))
        logger.info("%s %s replaced by %s", self._entity_name, key, actor)
        return record

    async def merge(self, key: str, values: Mapping[str, Any], actor: str) -> RecordT:
        """Partial update: only non-null fields apply.

        Attempts to null or blank a mandatory field are ignored, not errors.
        """
        record = await self.get(key)
        now = self._clock()
        partial = {
            field: value
            for field, value in self._known(values).items()
            if value is not None
            and not (field in self._mandatory_fields and _is_blank(value))
        }
        self._apply_rules(partial, now)
        await self._ensure_unique(partial, current=record)

        before = self._snapshot(record)
        for field, value in partial.items():
            setattr(record, field, value)
        record.audit = record.audit.touched(actor, now)
        await self._repo.save(record)

        await self._trail(ACTION_UPDATE, record, actor, now, old=before, new=self._snapshot(record))
        logger.info(
            "%s %s merged by %s (fields: %s)",
            self._entity_name, key, actor, ", ".join(sorted(partial)) or "-",
        )
        return record

    async def soft_delete(self, key: str, actor: str) -> None:
        record = await self.get(key)
        now = self._clock()
        before = self._snapshot(record)

        if not await self._repo.soft_delete(key, actor=actor, at=now):
            # Deleted concurrently between the load and the update.
            raise NotFoundError(self._entity_name, key)

        await self._trail(ACTION_DELETE, record, actor, now, old=before, new=None)
        logger.info("%s %s soft-deleted by %s", self._entity_name, key, actor)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _known(self, values: Mapping[str, Any]) -> dict[str, Any]:
        unknown = sorted(set(values) - set(self._mutable_fields))
        if unknown:
            raise ValidationError(
                f"Unknown {self._entity_name} field(s): {', '.join(unknown)}", field=unknown[0]
            )
        # A blank identifier is an absent one, not a shared value
        return {
            field: None if field in self._unique_fields and _is_blank(value) else value
            for field, value in values.items()
        }

    def _require_mandatory(self, candidate: Mapping[str, Any]) -> None:
        for field in self._mandatory_fields:
            if _is_blank(candidate.get(field)):
                raise ValidationError(f"{field} is required", field=field)

    def _apply_rules(self, candidate: Mapping[str, Any], now: datetime) -> None:
        for rule in self._rules:
            rule(candidate, now)

    async def _ensure_unique(
        self, candidate: Mapping[str, Any], *, current: RecordT | None = None
    ) -> None:
        """Raise DuplicateError if another live record already holds a constrained value."""
        for field in self._unique_fields:
            value = candidate.get(field)
            if value is None:
                continue
            if current is not None and getattr(current, field) == value:
                continue
            holder = await self._repo.find_by(field, value)
            if holder is not None and (current is None or holder.id != current.id):
                logger.info(
                    "Rejected %s write: %s already held by %s", self._entity_name, field, holder.id
                )
                raise DuplicateError(self._entity_name, field, value)

    # ------------------------------------------------------------------
    # Audit trail
    # ------------------------------------------------------------------

    def _snapshot(self, record: RecordT) -> dict[str, Any]:
        return {field: _json_safe(getattr(record, field)) for field in self._mutable_fields}

    async def _trail(
        self,
        action: str,
        record: RecordT,
        actor: str,
        now: datetime,
        *,
        old: dict[str, Any] | None,
        new: dict[str, Any] | None,
    ) -> None:
        if self._audit_trail is None:
            return
        await self._audit_trail.record(
            action=action,
            entity_type=self._entity_name,
            entity_id=record.id,
            actor=actor,
            old_value=old,
            new_value=new,
            at=now,
        )
