"""Registration, login and administrator bootstrap."""

import pytest
from pydantic import ValidationError as SchemaValidationError

from civic_registry.core.exceptions import ConflictError, ForbiddenError, UnauthorizedError
from civic_registry.domain.user import UserRole
from civic_registry.repositories.user import UserRepository
from civic_registry.schemas.auth import RegisterRequest
from civic_registry.services.auth import AuthService
from civic_registry.services.token import TokenService


def _register_request(**overrides) -> RegisterRequest:
    values = {
        "email": "Ada@Amt-Berlin.de",
        "password": "Secret#123",
        "first_name": "Ada",
        "last_name": "Lovelace",
    }
    values.update(overrides)
    return RegisterRequest(**values)


@pytest.fixture
def auth(session, token_settings, clock) -> AuthService:
    return AuthService(
        session,
        TokenService(token_settings(ttl_seconds=900), clock),
        TokenService(
            token_settings(ttl_seconds=7 * 24 * 3600, audience="civic-registry-refresh"), clock
        ),
    )


@pytest.mark.asyncio
class TestRegister:
    async def test_creates_user_with_default_role(self, auth, session):
        result = await auth.register(_register_request())

        assert result.user.email == "ada@amt-berlin.de"
        assert result.user.role == UserRole.USER
        assert result.user.password_hash != "Secret#123"
        assert result.expires_in == 900
        assert await UserRepository(session).exists_by_email("ADA@amt-berlin.de")

    async def test_tokens_are_bound_to_the_new_user(self, auth, token_settings, clock):
        result = await auth.register(_register_request())
        access = TokenService(token_settings(ttl_seconds=900), clock)
        refresh = TokenService(
            token_settings(ttl_seconds=7 * 24 * 3600, audience="civic-registry-refresh"), clock
        )

        assert access.verify(result.access_token, "ada@amt-berlin.de") is True
        assert refresh.verify(result.refresh_token, "ada@amt-berlin.de") is True
        assert refresh.decode(result.refresh_token).expires_at > access.decode(
            result.access_token
        ).expires_at

    async def test_refresh_token_is_not_an_access_token(self, auth, token_settings, clock):
        result = await auth.register(_register_request())
        access = TokenService(token_settings(ttl_seconds=900), clock)

        assert access.verify(result.refresh_token, "ada@amt-berlin.de") is False

    async def test_duplicate_email(self, auth):
        await auth.register(_register_request())
        with pytest.raises(ConflictError):
            await auth.register(_register_request(email="ada@amt-berlin.de"))


@pytest.mark.asyncio
class TestLogin:
    async def test_success(self, auth):
        await auth.register(_register_request())
        result = await auth.login("ada@amt-berlin.de", "Secret#123")
        assert result.user.email == "ada@amt-berlin.de"

    @pytest.mark.parametrize("email,password", [
        ("ada@amt-berlin.de", "Wrong#123"),
        ("nobody@amt-berlin.de", "Secret#123"),
    ])
    async def test_bad_credentials_are_indistinguishable(self, auth, email, password):
        await auth.register(_register_request())
        with pytest.raises(UnauthorizedError) as exc:
            await auth.login(email, password)
        assert exc.value.code == "BAD_CREDENTIALS"

    async def test_disabled_principal(self, auth):
        result = await auth.register(_register_request())
        result.user.enabled = False
        with pytest.raises(ForbiddenError):
            await auth.login("ada@amt-berlin.de", "Secret#123")


@pytest.mark.asyncio
async def test_ensure_admin_is_idempotent(auth, session):
    first = await auth.ensure_admin("Admin@Amt-Berlin.de", "Admin#12345")
    second = await auth.ensure_admin("admin@amt-berlin.de", "Other#12345")

    assert first.id == second.id
    assert first.role == UserRole.ADMIN
    assert first.email == "admin@amt-berlin.de"


class TestRegisterRequest:
    @pytest.mark.parametrize("password", [
        "Sh#1a",
        "nodigits#Abc",
        "NOLOWER#123",
        "noupper#123",
        "NoSpecial123",
        "With space#1A",
    ])
    def test_weak_passwords_are_rejected(self, password):
        with pytest.raises(SchemaValidationError):
            _register_request(password=password)

    def test_accepts_camel_case_payload(self):
        request = RegisterRequest.model_validate({
            "email": "ada@amt-berlin.de",
            "password": "Secret#123",
            "firstName": "Ada",
            "lastName": "Lovelace",
        })
        assert request.first_name == "Ada"
