from __future__ import annotations

import io
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from flask import Flask

from vidshare.application.services.sessions import AuthSession
from vidshare.application.services.tokens import TokenPair
from vidshare.domain.accounts.entities import AccountProfile
from vidshare.domain.accounts.exceptions import (
    EmailNotVerifiedError,
    MissingTokenError,
    ReuseDetectedError,
)
from vidshare.interfaces.http.auth_gate import AuthGate
from vidshare.interfaces.http.controllers.auth_controller import AuthController
from vidshare.shared.config import AppConfig
from vidshare.shared.errors import register_error_handler

PROFILE = AccountProfile(
    id=1,
    full_name="Alice Liddell",
    username="alice",
    email="alice@example.com",
    avatar_url="https://cdn.test/a.png",
    cover_image_url="https://cdn.test/c.png",
    is_email_verified=True,
    created_at=datetime(2025, 1, 1, tzinfo=UTC),
)


@pytest.fixture()
def use_cases() -> dict[str, MagicMock]:
    return {
        name: MagicMock()
        for name in (
            "register_use_case",
            "verify_email_use_case",
            "resend_code_use_case",
            "login_use_case",
            "logout_use_case",
            "refresh_use_case",
            "change_password_use_case",
            "current_account_use_case",
        )
    }


@pytest.fixture()
def flask_app(use_cases, tokens, accounts) -> Flask:
    app = Flask(__name__)
    register_error_handler(app)
    controller = AuthController(
        config=AppConfig(),
        gate=AuthGate(tokens=tokens, accounts=accounts),
        **use_cases,
    )
    app.register_blueprint(controller.as_blueprint())

    @app.get("/boom")
    def boom():
        raise RuntimeError("secret internals")

    return app


def _cookies(response) -> dict[str, str]:
    out = {}
    for header in response.headers.getlist("Set-Cookie"):
        name, _, rest = header.partition("=")
        out[name] = rest
    return out


def test_register_requires_avatar(flask_app, use_cases) -> None:
    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/register",
            data={
                "fullName": "Alice",
                "email": "alice@example.com",
                "username": "alice",
                "password": "secret123",
            },
            content_type="multipart/form-data",
        )

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["message"] == "Avatar file is required"
    use_cases["register_use_case"].execute.assert_not_called()


def test_register_rejects_invalid_fields(flask_app) -> None:
    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/register",
            data={"fullName": "", "email": "not-an-email", "username": "al", "password": "x"},
            content_type="multipart/form-data",
        )

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    fields = {entry["field"] for entry in payload["errors"]}
    assert {"fullName", "email", "username", "password"} <= fields


def test_register_passes_uploads_and_cleans_temp_files(flask_app, use_cases) -> None:
    seen: dict[str, Path] = {}

    def _execute(data):
        seen["avatar"] = data.avatar_path
        seen["cover"] = data.cover_image_path
        assert data.avatar_path.read_bytes() == b"avatar-bytes"
        return PROFILE

    use_cases["register_use_case"].execute.side_effect = _execute

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/register",
            data={
                "fullName": "Alice Liddell",
                "email": "alice@example.com",
                "username": "alice",
                "password": "secret123",
                "avatar": (io.BytesIO(b"avatar-bytes"), "me.png"),
                "coverImage": (io.BytesIO(b"cover-bytes"), "cover.png"),
            },
            content_type="multipart/form-data",
        )

    assert response.status_code == 201
    payload = response.get_json()
    assert payload == {
        "success": True,
        "statusCode": 201,
        "data": {
            "id": 1,
            "fullName": "Alice Liddell",
            "username": "alice",
            "email": "alice@example.com",
            "avatar": "https://cdn.test/a.png",
            "coverImage": "https://cdn.test/c.png",
            "isEmailVerified": True,
            "createdAt": "2025-01-01T00:00:00Z",
        },
        "message": "User registered successfully",
    }
    assert not seen["avatar"].exists()
    assert not seen["cover"].exists()


def test_login_sets_session_cookies(flask_app, use_cases) -> None:
    use_cases["login_use_case"].execute.return_value = AuthSession(
        account=PROFILE, access_token="access-abc", refresh_token="refresh-xyz"
    )

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/login", json={"email": "alice@example.com", "password": "secret123"}
        )

    assert response.status_code == 200
    use_cases["login_use_case"].execute.assert_called_once_with("alice@example.com", "secret123")
    data = response.get_json()["data"]
    assert data["accessToken"] == "access-abc"
    assert data["refreshToken"] == "refresh-xyz"
    assert data["user"]["username"] == "alice"

    cookies = _cookies(response)
    assert cookies["accessToken"].startswith("access-abc;")
    assert "Max-Age=900" in cookies["accessToken"]
    assert "HttpOnly" in cookies["accessToken"]
    assert "Max-Age=1296000" in cookies["refreshToken"]


def test_login_requires_identifier(flask_app, use_cases) -> None:
    with flask_app.test_client() as client:
        response = client.post("/api/v1/users/login", json={"password": "secret123"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"
    use_cases["login_use_case"].execute.assert_not_called()


def test_login_domain_error_rendered_as_envelope(flask_app, use_cases) -> None:
    use_cases["login_use_case"].execute.side_effect = EmailNotVerifiedError()

    with flask_app.test_client() as client:
        response = client.post("/api/v1/users/login", json={"username": "alice", "password": "x"})

    assert response.status_code == 401
    assert response.get_json() == {
        "success": False,
        "statusCode": 401,
        "message": "Please verify your email first",
        "errors": [],
        "error": "email_not_verified",
    }


def test_verify_email_sets_cookies(flask_app, use_cases) -> None:
    use_cases["verify_email_use_case"].execute.return_value = AuthSession(
        account=PROFILE, access_token="a1", refresh_token="r1"
    )

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/verify_email", json={"email": "alice@example.com", "code": 123456}
        )

    assert response.status_code == 201
    use_cases["verify_email_use_case"].execute.assert_called_once_with(
        "alice@example.com", "123456"
    )
    assert set(_cookies(response)) == {"accessToken", "refreshToken"}


def test_refresh_reads_body_token_when_no_cookie(flask_app, use_cases) -> None:
    use_cases["refresh_use_case"].execute.return_value = TokenPair("a2", "r2")

    with flask_app.test_client() as client:
        response = client.post("/api/v1/users/refresh_token", json={"refreshToken": "r1"})

    assert response.status_code == 200
    use_cases["refresh_use_case"].execute.assert_called_once_with("r1")
    assert response.get_json()["data"] == {"accessToken": "a2", "refreshToken": "r2"}


def test_refresh_prefers_cookie(flask_app, use_cases) -> None:
    use_cases["refresh_use_case"].execute.return_value = TokenPair("a2", None)

    with flask_app.test_client() as client:
        client.set_cookie("refreshToken", "cookie-token")
        response = client.post("/api/v1/users/refresh_token", json={"refreshToken": "body-token"})

    use_cases["refresh_use_case"].execute.assert_called_once_with("cookie-token")
    assert response.get_json()["data"] == {"accessToken": "a2"}
    assert set(_cookies(response)) == {"accessToken"}


@pytest.mark.parametrize(
    ("error", "code"),
    [(MissingTokenError(), "missing_token"), (ReuseDetectedError(), "refresh_token_reused")],
)
def test_refresh_failures_are_401(flask_app, use_cases, error, code) -> None:
    use_cases["refresh_use_case"].execute.side_effect = error

    with flask_app.test_client() as client:
        response = client.post("/api/v1/users/refresh_token")

    assert response.status_code == 401
    assert response.get_json()["error"] == code


def test_gate_rejects_missing_and_bad_tokens(flask_app, use_cases) -> None:
    with flask_app.test_client() as client:
        missing = client.get("/api/v1/users/current_user")
        bad = client.get(
            "/api/v1/users/current_user", headers={"Authorization": "Bearer nope"}
        )

    assert missing.status_code == 401
    assert missing.get_json()["error"] == "unauthorized"
    assert bad.status_code == 401
    use_cases["current_account_use_case"].execute.assert_not_called()


def test_gate_rejects_refresh_token_as_access(flask_app, tokens, make_account) -> None:
    account = make_account()
    with flask_app.test_client() as client:
        response = client.get(
            "/api/v1/users/current_user",
            headers={"Authorization": f"Bearer {tokens.issue_refresh_token(account.id)}"},
        )
    assert response.status_code == 401


def test_gate_accepts_bearer_and_cookie(flask_app, use_cases, tokens, make_account) -> None:
    account = make_account()
    use_cases["current_account_use_case"].execute.return_value = PROFILE
    token = tokens.issue_access_token(account.id)

    with flask_app.test_client() as client:
        by_header = client.get(
            "/api/v1/users/current_user", headers={"Authorization": f"Bearer {token}"}
        )
        client.set_cookie("accessToken", token)
        by_cookie = client.get("/api/v1/users/current_user")

    assert by_header.status_code == 200
    assert by_cookie.status_code == 200
    use_cases["current_account_use_case"].execute.assert_called_with(account.id)


def test_gate_rejects_token_of_deleted_account(flask_app, accounts, tokens, make_account) -> None:
    account = make_account()
    token = tokens.issue_access_token(account.id)
    accounts.delete(account.id)

    with flask_app.test_client() as client:
        response = client.get(
            "/api/v1/users/current_user", headers={"Authorization": f"Bearer {token}"}
        )
    assert response.status_code == 401


def test_logout_clears_cookies(flask_app, use_cases, tokens, make_account) -> None:
    account = make_account()
    token = tokens.issue_access_token(account.id)

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/logout", headers={"Authorization": f"Bearer {token}"}
        )

    assert response.status_code == 200
    use_cases["logout_use_case"].execute.assert_called_once_with(account.id)
    cookies = _cookies(response)
    assert cookies["accessToken"].startswith(";") or cookies["accessToken"].startswith('"";')
    assert "Max-Age=0" in cookies["refreshToken"]


def test_change_password_validates_payload(flask_app, use_cases, tokens, make_account) -> None:
    account = make_account()
    headers = {"Authorization": f"Bearer {tokens.issue_access_token(account.id)}"}

    with flask_app.test_client() as client:
        invalid = client.post("/api/v1/users/change_password", json={}, headers=headers)
        ok = client.post(
            "/api/v1/users/change_password",
            json={"oldPassword": "secret123", "newPassword": "new-secret-1"},
            headers=headers,
        )

    assert invalid.status_code == 400
    assert ok.status_code == 200
    use_cases["change_password_use_case"].execute.assert_called_once_with(
        account.id, "secret123", "new-secret-1"
    )


def test_unexpected_errors_are_opaque(flask_app) -> None:
    with flask_app.test_client() as client:
        response = client.get("/boom")

    assert response.status_code == 500
    payload = response.get_json()
    assert payload["message"] == "Internal Server Error"
    assert "secret internals" not in response.get_data(as_text=True)


def test_unknown_route_uses_error_envelope(flask_app) -> None:
    with flask_app.test_client() as client:
        response = client.get("/api/v1/users/nope")

    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["statusCode"] == 404
