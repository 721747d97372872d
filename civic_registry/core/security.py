"""Password hashing and bearer-token extraction.

Pure helpers with no FastAPI dependency so services can use them. The
request-bound dependencies built on top live in
:mod:`civic_registry.routers.deps`.
"""

from __future__ import annotations

from dataclasses import dataclass

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_password_hasher = PasswordHasher()


@dataclass(frozen=True, slots=True)
class AuthenticatedPrincipal:
    """The actor resolved from a verified bearer token."""

    email: str
    role: str

    @property
    def actor(self) -> str:
        """Identifier stamped into created_by / updated_by."""
        return self.email


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


# ---------------------------------------------------------------------------
# Passwords (Argon2)
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


# ---------------------------------------------------------------------------
# Bearer extraction
# ---------------------------------------------------------------------------

def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from `Authorization: Bearer <token>`, or None."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None
