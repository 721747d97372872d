"""initial registry schema: persons, users, audit_trail

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 14:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_LIVE_ROWS = sa.text("NOT deleted")

_GENDERS = ("MALE", "FEMALE", "DIVERSE", "UNKNOWN")
_MARITAL_STATUSES = ("SINGLE", "MARRIED", "DIVORCED", "WIDOWED", "REGISTERED_PARTNERSHIP")
_ROLES = ("USER", "OFFICER", "ADMIN")


def upgrade() -> None:
    op.create_table(
        "persons",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(50), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("middle_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("maiden_name", sa.String(100), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column(
            "gender",
            sa.Enum(*_GENDERS, name="gender", native_enum=False, length=20),
            nullable=True,
        ),
        sa.Column("citizenship", sa.String(100), nullable=True),
        sa.Column("street", sa.String(255), nullable=True),
        sa.Column("house_number", sa.String(20), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("mobile_phone", sa.String(50), nullable=True),
        sa.Column(
            "marital_status",
            sa.Enum(*_MARITAL_STATUSES, name="maritalstatus", native_enum=False, length=50),
            nullable=True,
        ),
        sa.Column("birth_place", sa.String(100), nullable=True),
        sa.Column("national_id_number", sa.String(50), nullable=True),
        sa.Column("tax_id", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("updated_by", sa.String(255), nullable=True),
        sa.Column("deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
    )
    op.create_index("ix_persons_last_name", "persons", ["last_name"])
    op.create_index("ix_persons_date_of_birth", "persons", ["date_of_birth"])
    op.create_index("ix_persons_city", "persons", ["city"])
    op.create_index("ix_persons_deleted", "persons", ["deleted"])
    # Uniqueness only among live rows
    for name, column in (
        ("uq_persons_email_live", "email"),
        ("uq_persons_national_id_live", "national_id_number"),
        ("uq_persons_tax_id_live", "tax_id"),
    ):
        op.create_index(
            name, "persons", [column], unique=True,
            sqlite_where=_LIVE_ROWS, postgresql_where=_LIVE_ROWS,
        )

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column(
            "role",
            sa.Enum(*_ROLES, name="userrole", native_enum=False, length=20),
            nullable=False,
        ),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "audit_trail",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("actor", sa.String(255), nullable=True),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("entity_type", sa.String(100), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("old_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_trail_actor", "audit_trail", ["actor"])
    op.create_index("ix_audit_trail_action", "audit_trail", ["action"])
    op.create_index("ix_audit_trail_entity_type", "audit_trail", ["entity_type"])
    op.create_index("ix_audit_trail_entity_id", "audit_trail", ["entity_id"])
    op.create_index("ix_audit_trail_created_at", "audit_trail", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_trail")
    op.drop_table("users")
    op.drop_table("persons")
