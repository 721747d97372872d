"""Auth Pydantic schemas (registration, login, issued tokens)."""


import re

from pydantic import EmailStr, Field, field_validator

from civic_registry.domain.user import UserRole
from civic_registry.schemas.common import CamelModel

_PASSWORD_SPECIALS = "@#$%^&+=!"


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)

    @field_validator("password")
    @classmethod
    def _password_strength(cls, value: str) -> str:
        checks = (
            (r"\d", "a digit"),
            (r"[a-z]", "a lowercase letter"),
            (r"[A-Z]", "an uppercase letter"),
            (f"[{re.escape(_PASSWORD_SPECIALS)}]", f"one of {_PASSWORD_SPECIALS}"),
        )
        for pattern, label in checks:
            if not re.search(pattern, value):
                raise ValueError(f"Password must contain {label}")
        if re.search(r"\s", value):
            raise ValueError("Password must not contain whitespace")
        return value


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthenticationResponse(CamelModel):
    token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
