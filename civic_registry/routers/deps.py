"""Request-bound dependencies: token services and the authenticated principal.

Flow for every protected endpoint:
  Authorization header -> bearer string -> extract_subject -> load principal
  -> verify(token, principal.email) -> enabled check -> AuthenticatedPrincipal

The principal's role is taken from the stored user, not from the token, so a
role change takes effect on the next request.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from civic_registry.core.config import settings
from civic_registry.core.exceptions import ForbiddenError, TokenInvalidError, UnauthorizedError
from civic_registry.core.security import AuthenticatedPrincipal, extract_bearer_token
from civic_registry.db.base import get_db
from civic_registry.domain.user import UserRole
from civic_registry.repositories.user import UserRepository
from civic_registry.services.token import (
    TokenService,
    access_token_service,
    refresh_token_service,
)

logger = logging.getLogger(__name__)


def get_access_tokens() -> TokenService:
    return access_token_service(settings)


def get_refresh_tokens() -> TokenService:
    return refresh_token_service(settings)


async def get_current_principal(
    authorization: str | None = Header(default=None),
    tokens: TokenService = Depends(get_access_tokens),
    session: AsyncSession = Depends(get_db),
) -> AuthenticatedPrincipal:
    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthorizedError()

    subject = tokens.extract_subject(token)  # TokenParseError -> 401
    user = await UserRepository(session).get_by_email(subject)
    if user is None or not tokens.verify(token, user.email):
        raise TokenInvalidError("Invalid or expired token")
    if not user.enabled:
        logger.info("Rejected request from disabled principal %s", user.email)
        raise ForbiddenError("Account is disabled")

    return AuthenticatedPrincipal(email=user.email, role=user.role.value)


def require_role(*roles: UserRole) -> Callable[..., Awaitable[AuthenticatedPrincipal]]:
    """Dependency factory: the principal must hold one of ``roles``."""
    allowed = {role.value for role in roles}

    async def _checker(
        principal: AuthenticatedPrincipal = Depends(get_current_principal),
    ) -> AuthenticatedPrincipal:
        if principal.role not in allowed:
            raise ForbiddenError(f"Requires role: {', '.join(sorted(allowed))}")
        return principal

    return _checker


require_writer = require_role(UserRole.OFFICER, UserRole.ADMIN)
require_admin = require_role(UserRole.ADMIN)
