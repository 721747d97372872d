"""Auth service — principal registration, login and admin bootstrap.

Rule: No FastAPI here. Tokens come from the injected TokenService pair.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from civic_registry.core.exceptions import ConflictError, ForbiddenError, UnauthorizedError
from civic_registry.core.security import hash_password, normalize_email, verify_password
from civic_registry.domain.user import User, UserRole
from civic_registry.repositories.user import UserRepository
from civic_registry.schemas.auth import RegisterRequest
from civic_registry.services.token import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    user: User
    access_token: str
    refresh_token: str
    expires_in: int


class AuthService:
    def __init__(
        self,
        session: AsyncSession,
        access_tokens: TokenService,
        refresh_tokens: TokenService,
    ):
        self._repo = UserRepository(session)
        self._access_tokens = access_tokens
        self._refresh_tokens = refresh_tokens

    async def register(self, data: RegisterRequest) -> AuthResult:
        email = normalize_email(data.email)
        if await self._repo.exists_by_email(email):
            raise ConflictError(f"Email '{email}' is already registered", code="EMAIL_TAKEN")

        user = User(
            email=email,
            password_hash=hash_password(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            role=UserRole.USER,
            enabled=True,
        )
        await self._repo.add(user)
        logger.info("Registered principal %s", email)
        return self._issue(user)

    async def login(self, email: str, password: str) -> AuthResult:
        user = await self._repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", normalize_email(email))
            raise UnauthorizedError("Invalid email or password", code="BAD_CREDENTIALS")
        if not user.enabled:
            raise ForbiddenError("Account is disabled")

        logger.info("Principal %s logged in", user.email)
        return self._issue(user)

    async def ensure_admin(self, email: str, password: str) -> User:
        """Create the administrator principal unless one with this email exists."""
        existing = await self._repo.get_by_email(email)
        if existing is not None:
            return existing

        admin = User(
            email=normalize_email(email),
            password_hash=hash_password(password),
            first_name="System",
            last_name="Administrator",
            role=UserRole.ADMIN,
            enabled=True,
        )
        await self._repo.add(admin)
        logger.info("Seeded administrator %s", admin.email)
        return admin

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(
            user=user,
            access_token=self._access_tokens.issue(user),
            refresh_token=self._refresh_tokens.issue(user),
            expires_in=self._access_tokens.ttl_seconds,
        )
