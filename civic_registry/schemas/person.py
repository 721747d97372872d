"""Person Pydantic schemas (request DTOs and response models)."""


from datetime import date, datetime
from typing import Any

from pydantic import EmailStr, Field

from civic_registry.domain.person import Gender, MaritalStatus
from civic_registry.schemas.common import CamelModel

_PHONE_PATTERN = r"^[\d\s+\-()]*$"
_NATIONAL_ID_PATTERN = r"^[A-Z0-9]*$"
_TAX_ID_PATTERN = r"^[0-9]*$"


class PersonFields(CamelModel):
    """Optional person fields shared by every request DTO."""

    title: str | None = Field(default=None, max_length=50)
    middle_name: str | None = Field(default=None, max_length=100)
    maiden_name: str | None = Field(default=None, max_length=100)
    gender: Gender | None = None
    citizenship: str | None = Field(default=None, max_length=100)
    street: str | None = Field(default=None, max_length=255)
    house_number: str | None = Field(default=None, max_length=20)
    postal_code: str | None = Field(default=None, max_length=20)
    city: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50, pattern=_PHONE_PATTERN)
    mobile_phone: str | None = Field(default=None, max_length=50, pattern=_PHONE_PATTERN)
    marital_status: MaritalStatus | None = None
    birth_place: str | None = Field(default=None, max_length=100)
    national_id_number: str | None = Field(
        default=None, max_length=50, pattern=_NATIONAL_ID_PATTERN,
    )  # uppercase letters and digits only
    tax_id: str | None = Field(default=None, max_length=50, pattern=_TAX_ID_PATTERN)


class PersonCreate(PersonFields):
    """Body for POST (create) and PUT (full replace)."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    date_of_birth: date


class PersonPatch(PersonFields):
    """Body for PATCH: omitted or null fields keep their stored value."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    date_of_birth: date | None = None


class PersonOut(CamelModel):
    id: str
    title: str | None = None
    first_name: str
    middle_name: str | None = None
    last_name: str
    maiden_name: str | None = None
    full_name: str
    date_of_birth: date
    gender: Gender | None = None
    citizenship: str | None = None
    street: str | None = None
    house_number: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile_phone: str | None = None
    marital_status: MaritalStatus | None = None
    birth_place: str | None = None
    national_id_number: str | None = None
    tax_id: str | None = None
    deleted: bool
    created_at: datetime
    updated_at: datetime
    created_by: str | None = None
    updated_by: str | None = None


class AuditEntryOut(CamelModel):
    id: str
    actor: str | None = None
    action: str
    entity_type: str
    entity_id: str
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    created_at: datetime


class CountOut(CamelModel):
    count: int
