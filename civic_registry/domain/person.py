"""SQLAlchemy ORM model for natural persons in the registry.

A Person embeds AuditMetadata through AuditColumnsMixin. Rows are never
physically deleted; ``deleted = true`` marks them as logically gone and the
partial unique indexes below only cover live rows, so an email, national id
or tax id becomes reusable once its holder has been soft-deleted.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import Date, Enum, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from civic_registry.core.exceptions import ValidationError
from civic_registry.db.base import Base
from civic_registry.domain.mixins import AuditColumnsMixin

_LIVE_ROWS = text("NOT deleted")


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    DIVERSE = "DIVERSE"
    UNKNOWN = "UNKNOWN"


class MaritalStatus(str, enum.Enum):
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    WIDOWED = "WIDOWED"
    REGISTERED_PARTNERSHIP = "REGISTERED_PARTNERSHIP"


GERMAN_COUNTRY_NAMES = frozenset({"de", "deutschland", "germany"})


class Person(Base, AuditColumnsMixin):
    __tablename__ = "persons"
    __table_args__ = (
        Index("uq_persons_email_live", "email", unique=True,
              sqlite_where=_LIVE_ROWS, postgresql_where=_LIVE_ROWS),
        Index("uq_persons_national_id_live", "national_id_number", unique=True,
              sqlite_where=_LIVE_ROWS, postgresql_where=_LIVE_ROWS),
        Index("uq_persons_tax_id_live", "tax_id", unique=True,
              sqlite_where=_LIVE_ROWS, postgresql_where=_LIVE_ROWS),
    )

    MANDATORY_FIELDS = ("first_name", "last_name", "date_of_birth")
    UNIQUE_FIELDS = ("email", "national_id_number", "tax_id")
    MUTABLE_FIELDS = (
        "title", "first_name", "middle_name", "last_name", "maiden_name",
        "date_of_birth", "gender", "citizenship",
        "street", "house_number", "postal_code", "city", "country",
        "email", "phone", "mobile_phone",
        "marital_status", "birth_place", "national_id_number", "tax_id",
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # Name
    title: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    maiden_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Personal data
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    gender: Mapped[Optional[Gender]] = mapped_column(
        Enum(Gender, native_enum=False, length=20), nullable=True
    )
    citizenship: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Postal address
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    house_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Contact
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    mobile_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Civil status and identifiers
    marital_status: Mapped[Optional[MaritalStatus]] = mapped_column(
        Enum(MaritalStatus, native_enum=False, length=50), nullable=True
    )
    birth_place: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    national_id_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tax_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def age(self, today: date | None = None) -> int:
        today = today or date.today()
        born = self.date_of_birth
        had_birthday = (today.month, today.day) >= (born.month, born.day)
        return today.year - born.year - (0 if had_birthday else 1)

    def is_adult(self, today: date | None = None) -> bool:
        return self.age(today) >= 18

    def is_senior(self, today: date | None = None) -> bool:
        return self.age(today) >= 65

    @property
    def full_name(self) -> str:
        """Title, first, middle and last name with empty parts skipped."""
        parts = [self.title, self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p).strip()

    @property
    def official_name(self) -> str:
        return f"{self.last_name}, {self.first_name}"

    @property
    def full_address(self) -> str:
        return (
            f"{self.street} {self.house_number}, "
            f"{self.postal_code} {self.city}, {self.country}"
        )

    def is_german_address(self) -> bool:
        return (self.country or "").strip().lower() in GERMAN_COUNTRY_NAMES

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Person):
            return NotImplemented
        if self.id is not None and other.id is not None:
            return self.id == other.id
        if self.email is not None and other.email is not None:
            return self.email == other.email
        if self.national_id_number is not None and other.national_id_number is not None:
            return self.national_id_number == other.national_id_number
        return False

    def __hash__(self) -> int:
        """Hash of the storage key.

        The key is assigned at flush, so an unsaved Person hashes by object
        identity and must not be used as a set member or dict key until saved.
        """
        if self.id is not None:
            return hash(self.id)
        return object.__hash__(self)

    def __repr__(self) -> str:
        return f"Person(id={self.id!r}, name={self.full_name!r}, email={self.email!r})"


def check_birth_date(values: Mapping[str, Any], now: datetime) -> None:
    """Reject a date of birth that lies after today."""
    born = values.get("date_of_birth")
    if born is not None and born > now.date():
        raise ValidationError("Date of birth must not be in the future", field="date_of_birth")
