"""
End-to-end tests for register / login / profile / users.
"""

import time
from unittest.mock import patch

import jwt
import pytest

from auth.password import verify_password
from auth.tokens import TokenService


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def _register(client, email="a@x.com", password="secret1", name="A"):
    return await client.post(
        "/auth/register", json={"email": email, "password": password, "name": name}
    )


@pytest.mark.asyncio
class TestRegister:
    async def test_register_then_profile(self, client, tokens):
        resp = await _register(client)

        assert resp.status_code == 201
        body = resp.json()
        assert body["token"]
        assert body["expiresIn"] == "1h"
        assert body["user"]["email"] == "a@x.com"
        assert body["user"]["provider"] == "local"
        assert set(body["user"]) == {"id", "email", "name", "provider"}
        assert tokens.verify(body["token"]).user_id == body["user"]["id"]

        profile = await client.get("/auth/profile", headers=_bearer(body["token"]))
        assert profile.status_code == 200
        assert profile.json()["user"]["email"] == "a@x.com"
        assert profile.json()["user"]["id"] == body["user"]["id"]
        assert "password_hash" not in profile.json()["user"]

    async def test_duplicate_email_conflicts(self, client):
        first = await _register(client)
        second = await _register(client, password="another1", name="Other")

        assert second.status_code == 409
        assert second.json()["error"] == "conflict"

        # Original account still logs in with its own password.
        login = await client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"})
        assert login.status_code == 200
        assert login.json()["user"]["id"] == first.json()["user"]["id"]
        assert login.json()["user"]["name"] == "A"

    @pytest.mark.parametrize(
        "payload",
        [
            {"password": "secret1", "name": "A"},
            {"email": "a@x.com", "name": "A"},
            {"email": "a@x.com", "password": "secret1"},
            {"email": "", "password": "secret1", "name": "A"},
        ],
    )
    async def test_missing_fields(self, client, payload):
        resp = await client.post("/auth/register", json=payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"
        assert resp.json()["message"]

    async def test_short_password(self, client):
        resp = await _register(client, password="12345")
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"

    async def test_non_json_body(self, client):
        resp = await client.post(
            "/auth/register", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"


@pytest.mark.asyncio
class TestLogin:
    async def test_correct_password(self, client, tokens):
        registered = (await _register(client)).json()

        resp = await client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"})

        assert resp.status_code == 200
        body = resp.json()
        assert set(body["user"]) == {"id", "email", "name", "provider", "picture"}
        assert tokens.verify(body["token"]).user_id == registered["user"]["id"]

    async def test_wrong_password_and_unknown_email_look_the_same(self, client):
        await _register(client)

        wrong = await client.post("/auth/login", json={"email": "a@x.com", "password": "wrong"})
        unknown = await client.post("/auth/login", json={"email": "z@x.com", "password": "secret1"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert wrong.json()["error"] == "invalid_credentials"

    async def test_unknown_email_still_runs_bcrypt(self, client):
        with patch("database.store.verify_password", wraps=verify_password) as check:
            resp = await client.post(
                "/auth/login", json={"email": "nobody@x.com", "password": "secret1"}
            )

        assert resp.status_code == 401
        check.assert_called_once()

    async def test_missing_password(self, client):
        resp = await client.post("/auth/login", json={"email": "a@x.com"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"


@pytest.mark.asyncio
class TestProfileGuard:
    async def test_no_token(self, client):
        resp = await client.get("/auth/profile")
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthenticated"

    async def test_expired_token(self, client, settings):
        user_id = (await _register(client)).json()["user"]["id"]
        expired = jwt.encode(
            {"sub": user_id, "exp": int(time.time()) - 5}, settings.jwt_secret, algorithm="HS256"
        )

        resp = await client.get("/auth/profile", headers=_bearer(expired))

        assert resp.status_code == 401
        assert resp.json()["error"] == "session_expired"

    async def test_corrupted_signature(self, client):
        user_id = (await _register(client)).json()["user"]["id"]
        forged = TokenService("attacker-secret").issue(user_id)

        resp = await client.get("/auth/profile", headers=_bearer(forged))

        assert resp.status_code == 403
        assert resp.json()["error"] == "forbidden"

    async def test_token_for_missing_user(self, client, tokens):
        resp = await client.get(
            "/auth/profile", headers=_bearer(tokens.issue("00000000-0000-0000-0000-000000000000"))
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"


@pytest.mark.asyncio
class TestUserListing:
    async def test_lists_users_without_passwords(self, client):
        await _register(client)
        await _register(client, email="c@x.com", name="C")

        resp = await client.get("/auth/users")

        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 2
        assert {u["email"] for u in body["users"]} == {"a@x.com", "c@x.com"}
        assert all("password_hash" not in u for u in body["users"])

    async def test_disabled_listing_is_not_found(self, client, settings):
        settings.enable_user_listing = False
        resp = await client.get("/auth/users")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}
    assert "no-store" not in resp.headers.get("cache-control", "")


@pytest.mark.asyncio
async def test_auth_responses_are_not_cacheable(client):
    resp = await _register(client)

    assert resp.status_code == 201
    assert resp.headers["cache-control"] == "no-store"
    assert "x-process-time" in resp.headers
