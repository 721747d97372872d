"""Token service — issue and validate signed, time-bounded bearer credentials.

Wire format: a compact JWS (``header.claims.signature``, base64url) signed
with HMAC-SHA256. Claims are flat: ``sub`` (principal email), ``role``,
``iss``, ``aud``, ``iat``, ``exp``, ``jti``.

No server-side state: validity depends only on the signature, the claims
and the injected clock. There is no revocation list and no refresh-token
rotation; an access token and a refresh token are two TokenService
instances that differ in TTL and audience, so neither validates as the other.

Never log token strings.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

import jwt

from civic_registry.core.config import Settings
from civic_registry.core.exceptions import TokenInvalidError, TokenParseError
from civic_registry.domain.audit import Clock, utc_now

logger = logging.getLogger(__name__)

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_ROLE: str = "role"
CLAIM_ISS: str = "iss"
CLAIM_AUD: str = "aud"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_JTI: str = "jti"

REQUIRED_CLAIMS = [CLAIM_SUB, CLAIM_ROLE, CLAIM_ISS, CLAIM_AUD, CLAIM_IAT, CLAIM_EXP, CLAIM_JTI]


class TokenPrincipal(Protocol):
    email: str
    role: Any


@dataclass(frozen=True, slots=True)
class TokenSettings:
    secret: str
    ttl_seconds: int
    issuer: str
    audience: str


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: str
    role: str
    issuer: str
    audience: str
    issued_at: datetime
    expires_at: datetime
    token_id: str


def _role_value(role: Any) -> str:
    return str(getattr(role, "value", role))


def _from_timestamp(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class TokenService:
    def __init__(self, settings: TokenSettings, clock: Clock = utc_now):
        self._settings = settings
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._settings.ttl_seconds

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue(self, principal: TokenPrincipal) -> str:
        now = self._clock().timestamp()
        issued_at = int(now)
        payload: dict[str, Any] = {
            CLAIM_SUB: principal.email,
            CLAIM_ROLE: _role_value(principal.role),
            CLAIM_ISS: self._settings.issuer,
            CLAIM_AUD: self._settings.audience,
            CLAIM_IAT: issued_at,
            CLAIM_EXP: math.ceil(now + self._settings.ttl_seconds),  # never shorter than the TTL
            CLAIM_JTI: str(uuid.uuid4()),
        }
        return jwt.encode(payload, self._settings.secret, algorithm=JWT_ALGORITHM)

    # ------------------------------------------------------------------
    # Validate
    # ------------------------------------------------------------------

    def decode(self, token: str | None) -> TokenClaims:
        """Fully validate a token and return its claims.

        Expiry is checked against the injected clock, not wall time, so
        PyJWT's own ``exp``/``iat`` checks are turned off.

        Raises:
            TokenInvalidError: empty, malformed, wrongly signed, wrong
                issuer/audience, missing claims, or expired.
        """
        if not token:
            raise TokenInvalidError("Missing token")
        try:
            payload = jwt.decode(
                token,
                self._settings.secret,
                algorithms=[JWT_ALGORITHM],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
                options={
                    "require": REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
            claims = TokenClaims(
                subject=str(payload[CLAIM_SUB]),
                role=str(payload[CLAIM_ROLE]),
                issuer=str(payload[CLAIM_ISS]),
                audience=str(payload[CLAIM_AUD]),
                issued_at=_from_timestamp(payload[CLAIM_IAT]),
                expires_at=_from_timestamp(payload[CLAIM_EXP]),
                token_id=str(payload[CLAIM_JTI]),
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError("Invalid token") from exc
        except (TypeError, ValueError, OverflowError) as exc:
            raise TokenInvalidError("Invalid token claims") from exc

        if self._clock() >= claims.expires_at:
            raise TokenInvalidError("Token expired")
        return claims

    def verify(self, token: str | None, expected_subject: str) -> bool:
        """True only for an intact, unexpired token issued to ``expected_subject``."""
        try:
            claims = self.decode(token)
        except TokenInvalidError as exc:
            logger.debug("Token rejected: %s", exc.message)
            return False
        if claims.subject != expected_subject:
            logger.debug("Token rejected: subject mismatch")
            return False
        return True

    def extract_subject(self, token: str | None) -> str:
        """Return ``sub`` after checking the signature only.

        Expired tokens still yield their subject; issuer, audience and expiry
        are left to :meth:`decode` / :meth:`verify`.

        Raises:
            TokenParseError: empty, malformed, unsigned or wrongly signed input.
        """
        if not token:
            raise TokenParseError("Missing token")
        try:
            payload = jwt.decode(
                token,
                self._settings.secret,
                algorithms=[JWT_ALGORITHM],
                options={
                    "require": [CLAIM_SUB],
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "verify_aud": False,
                    "verify_iss": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenParseError() from exc

        subject = payload[CLAIM_SUB]
        if not isinstance(subject, str) or not subject:
            raise TokenParseError("Token has no subject")
        return subject


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def access_token_service(settings: Settings, clock: Clock = utc_now) -> TokenService:
    return TokenService(
        TokenSettings(
            secret=settings.jwt_secret,
            ttl_seconds=settings.jwt_access_ttl_seconds,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        ),
        clock,
    )


def refresh_token_service(settings: Settings, clock: Clock = utc_now) -> TokenService:
    return TokenService(
        TokenSettings(
            secret=settings.jwt_secret,
            ttl_seconds=settings.jwt_refresh_ttl_seconds,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_refresh_audience,
        ),
        clock,
    )
