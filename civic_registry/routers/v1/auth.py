"""Auth router — /api/v1/auth (registration and login)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from civic_registry.core.response import DataResponse
from civic_registry.db.base import get_db
from civic_registry.routers.deps import get_access_tokens, get_refresh_tokens
from civic_registry.schemas.auth import AuthenticationResponse, LoginRequest, RegisterRequest
from civic_registry.services.auth import AuthResult, AuthService
from civic_registry.services.token import TokenService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _svc(
    session: AsyncSession = Depends(get_db),
    access_tokens: TokenService = Depends(get_access_tokens),
    refresh_tokens: TokenService = Depends(get_refresh_tokens),
) -> AuthService:
    return AuthService(session, access_tokens, refresh_tokens)


def _to_response(result: AuthResult) -> AuthenticationResponse:
    return AuthenticationResponse(
        token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
        email=result.user.email,
        first_name=result.user.first_name,
        last_name=result.user.last_name,
        role=result.user.role,
    )


@router.post(
    "/register",
    response_model=DataResponse[AuthenticationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a USER principal and return its first token pair."""
    return {"data": _to_response(await svc.register(body))}


@router.post("/login", response_model=DataResponse[AuthenticationResponse])
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    return {"data": _to_response(await svc.login(body.email, body.password))}
