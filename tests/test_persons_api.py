"""HTTP boundary: authentication, role guards, envelopes and error mapping."""

import pytest

from civic_registry.domain.user import UserRole

BASE = "/api/v1/persons"

ERIKA = {
    "firstName": "Erika",
    "lastName": "Mustermann",
    "dateOfBirth": "1964-08-12",
    "city": "Berlin",
    "email": "erika@mustermann.de",
    "phone": "030 1234567",
}


async def _create(client, headers, body=None):
    response = await client.post(BASE, json=body or ERIKA, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
class TestAuthentication:
    async def test_missing_header(self, client):
        response = await client.get(BASE)
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_malformed_token(self, client):
        response = await client.get(BASE, headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_PARSE_ERROR"

    async def test_token_for_unknown_principal(self, client, access_tokens):
        class _Ghost:
            email = "ghost@amt-berlin.de"
            role = "ADMIN"

        headers = {"Authorization": f"Bearer {access_tokens.issue(_Ghost())}"}
        response = await client.get(BASE, headers=headers)
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_INVALID"

    async def test_disabled_principal(self, client, principal_headers):
        headers = await principal_headers(UserRole.OFFICER, enabled=False)
        response = await client.get(BASE, headers=headers)
        assert response.status_code == 403

    async def test_register_then_login(self, client):
        body = {
            "email": "ada@amt-berlin.de",
            "password": "Secret#123",
            "firstName": "Ada",
            "lastName": "Lovelace",
        }
        registered = await client.post("/api/v1/auth/register", json=body)
        assert registered.status_code == 201, registered.text
        assert registered.json()["data"]["role"] == "USER"

        again = await client.post("/api/v1/auth/register", json=body)
        assert again.status_code == 409

        login = await client.post(
            "/api/v1/auth/login", json={"email": "ada@amt-berlin.de", "password": "Secret#123"}
        )
        assert login.status_code == 200
        data = login.json()["data"]
        assert data["tokenType"] == "Bearer"
        assert data["expiresIn"] == 900
        assert data["refreshToken"] != data["token"]

        me = await client.get(BASE, headers={"Authorization": f"Bearer {data['token']}"})
        assert me.status_code == 200

    async def test_refresh_token_cannot_authenticate(self, client):
        body = {
            "email": "ada@amt-berlin.de",
            "password": "Secret#123",
            "firstName": "Ada",
            "lastName": "Lovelace",
        }
        registered = await client.post("/api/v1/auth/register", json=body)
        refresh_token = registered.json()["data"]["refreshToken"]

        response = await client.get(BASE, headers={"Authorization": f"Bearer {refresh_token}"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_INVALID"

    async def test_login_with_wrong_password(self, client, principal_headers):
        await principal_headers(UserRole.OFFICER)
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "officer@amt-berlin.de", "password": "Wrong#123"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "BAD_CREDENTIALS"


@pytest.mark.asyncio
class TestRoles:
    async def test_plain_user_cannot_write(self, client, principal_headers):
        headers = await principal_headers(UserRole.USER)
        response = await client.post(BASE, json=ERIKA, headers=headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    async def test_plain_user_can_read(self, client, principal_headers):
        officer = await principal_headers(UserRole.OFFICER)
        created = await _create(client, officer)
        user = await principal_headers(UserRole.USER)

        response = await client.get(f"{BASE}/{created['id']}", headers=user)
        assert response.status_code == 200

    async def test_include_deleted_is_admin_only(self, client, principal_headers):
        officer = await principal_headers(UserRole.OFFICER)
        response = await client.get(BASE, params={"includeDeleted": "true"}, headers=officer)
        assert response.status_code == 403

    async def test_history_is_admin_only(self, client, principal_headers):
        officer = await principal_headers(UserRole.OFFICER)
        created = await _create(client, officer)
        response = await client.get(f"{BASE}/{created['id']}/history", headers=officer)
        assert response.status_code == 403


@pytest.mark.asyncio
class TestPersonLifecycle:
    async def test_create_stamps_the_authenticated_actor(self, client, principal_headers):
        headers = await principal_headers(UserRole.OFFICER)
        person = await _create(client, headers)

        assert person["createdBy"] == "officer@amt-berlin.de"
        assert person["updatedBy"] == "officer@amt-berlin.de"
        assert person["fullName"] == "Erika Mustermann"
        assert person["deleted"] is False

    async def test_duplicate_email(self, client, principal_headers):
        headers = await principal_headers(UserRole.OFFICER)
        await _create(client, headers)

        response = await client.post(BASE, json={**ERIKA, "firstName": "Max"}, headers=headers)
        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "DUPLICATE"
        assert error["field"] == "email"

    async def test_future_birth_date(self, client, principal_headers):
        headers = await principal_headers(UserRole.OFFICER)
        response = await client.post(
            BASE, json={**ERIKA, "dateOfBirth": "2999-01-01"}, headers=headers
        )
        assert response.status_code == 422
        assert response.json()["error"]["field"] == "date_of_birth"

    async def test_missing_mandatory_field(self, client, principal_headers):
        headers = await principal_headers(UserRole.OFFICER)
        body = {k: v for k, v in ERIKA.items() if k != "lastName"}
        response = await client.post(BASE, json=body, headers=headers)
        assert response.status_code == 422

    async def test_put_replaces_and_patch_merges(self, client, principal_headers):
        headers = await principal_headers(UserRole.OFFICER)
        person = await _create(client, headers)
        url = f"{BASE}/{person['id']}"

        patched = await client.patch(url, json={"city": "Bonn", "lastName": None}, headers=headers)
        assert patched.status_code == 200
        assert patched.json()["data"]["city"] == "Bonn"
        assert patched.json()["data"]["lastName"] == "Mustermann"
        assert patched.json()["data"]["phone"] == "030 1234567"

        replaced = await client.put(
            url,
            json={"firstName": "Erika", "lastName": "Gabler", "dateOfBirth": "1964-08-12"},
            headers=headers,
        )
        assert replaced.status_code == 200
        data = replaced.json()["data"]
        assert data["lastName"] == "Gabler"
        assert data["phone"] is None
        assert data["email"] is None

    async def test_delete_is_soft(self, client, principal_headers):
        officer = await principal_headers(UserRole.OFFICER)
        admin = await principal_headers(UserRole.ADMIN)
        person = await _create(client, officer)
        url = f"{BASE}/{person['id']}"

        assert (await client.delete(url, headers=officer)).status_code == 204
        assert (await client.get(url, headers=officer)).status_code == 404
        assert (await client.delete(url, headers=officer)).status_code == 404

        listed = await client.get(BASE, params={"includeDeleted": "true"}, headers=admin)
        assert listed.json()["meta"]["total"] == 1
        assert listed.json()["data"][0]["deleted"] is True

        history = await client.get(f"{url}/history", headers=admin)
        assert [e["action"] for e in history.json()["data"]] == ["CREATE", "DELETE"]

        # The email is free again once its holder is deleted
        await _create(client, officer)

    async def test_search_and_count(self, client, principal_headers):
        headers = await principal_headers(UserRole.OFFICER)
        await _create(client, headers)
        await _create(client, headers, {
            "firstName": "Anna", "lastName": "Schmidt", "dateOfBirth": "2001-11-30",
            "city": "Hamburg",
        })

        listed = await client.get(
            BASE, params={"q": "schmidt", "sort": "lastName", "order": "asc"}, headers=headers
        )
        assert listed.status_code == 200
        assert [p["firstName"] for p in listed.json()["data"]] == ["Anna"]
        assert listed.json()["meta"] == {"total": 1, "page": 1, "limit": 20, "pages": 1}

        count = await client.get(f"{BASE}/count", params={"city": "Berlin"}, headers=headers)
        assert count.json()["data"]["count"] == 1

    async def test_unknown_person(self, client, principal_headers):
        headers = await principal_headers(UserRole.OFFICER)
        response = await client.get(f"{BASE}/does-not-exist", headers=headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"
