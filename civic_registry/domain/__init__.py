"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  person.py  — Person records (audited, soft-deleted, unique email / national id / tax id)
  user.py    — Principals that log in and act on records
  audit.py   — AuditMetadata value type + immutable audit trail (never updated or deleted)
  mixins.py  — TimestampMixin, AuditColumnsMixin
"""

from civic_registry.domain.audit import AuditMetadata, AuditTrail
from civic_registry.domain.person import Gender, MaritalStatus, Person
from civic_registry.domain.user import User, UserRole

__all__ = [
    "AuditMetadata",
    "AuditTrail",
    "Gender",
    "MaritalStatus",
    "Person",
    "User",
    "UserRole",
]
