# tests/test_app.py
import logging

import pytest
from fastapi.testclient import TestClient

from api.main import create_app, validation_message
from config import ConfigurationError
from conftest import LocalTestConfig
from logging_config import TimezoneFormatter


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "Welcome to the API"}
    assert client.get("/health").json()["status"] == "ok"


def test_unknown_route_uses_message_envelope(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert "message" in resp.json()


def test_unexpected_errors_surface_as_500(app):
    @app.get("/boom")
    def boom():
        raise RuntimeError("database exploded")

    client = TestClient(app, raise_server_exceptions=False)
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"message": "database exploded"}


def test_missing_secret_fails_at_startup():
    class NoSecret(LocalTestConfig):
        AUTH_SECRET_KEY = None

    with pytest.raises(ConfigurationError):
        create_app(NoSecret)


def test_validation_message_lists_missing_fields():
    errors = [
        {"loc": ("body", "email"), "type": "missing", "msg": "Field required"},
        {"loc": ("body", "otp"), "type": "string_too_short", "msg": "too short"},
    ]
    assert validation_message(errors) == "Please provide all required fields: email, otp"

    errors = [{"loc": ("body", "email"), "type": "value_error", "msg": "not an email"}]
    assert validation_message(errors) == "email: not an email"


def test_invalid_email_is_bad_request(client):
    resp = client.post("/auth/login", json={"email": "not-an-email", "password": "secret1"})
    assert resp.status_code == 400


def _login_attempt(client):
    return client.post("/auth/login", json={"email": "nobody@example.com", "password": "secret1"})


def test_auth_rate_limit_shared_across_endpoints():
    class Limited(LocalTestConfig):
        RATE_LIMIT_ENABLED = True
        AUTH_RATE_LIMIT = "3/minute"

    client = TestClient(create_app(Limited))
    for i in range(3):
        path = "/auth/login" if i % 2 else "/auth/forgot-password"
        resp = client.post(path, json={"email": "nobody@example.com", "password": "secret1"})
        assert resp.status_code in (401, 404)

    resp = _login_attempt(client)
    assert resp.status_code == 429
    assert resp.json() == {"message": "Too many login attempts, please try again after 15 minutes"}

    # Other routes count against their own bucket
    assert client.get("/products").status_code == 200


def test_rate_limits_are_per_application():
    class Limited(LocalTestConfig):
        RATE_LIMIT_ENABLED = True
        AUTH_RATE_LIMIT = "2/minute"

    limited = TestClient(create_app(Limited))
    unlimited = TestClient(create_app(LocalTestConfig))

    assert [_login_attempt(limited).status_code for _ in range(3)] == [401, 401, 429]
    assert [_login_attempt(unlimited).status_code for _ in range(5)] == [401] * 5


def test_api_rate_limit_covers_non_auth_routes():
    class Limited(LocalTestConfig):
        RATE_LIMIT_ENABLED = True
        API_RATE_LIMIT = "3/minute"

    client = TestClient(create_app(Limited))
    assert client.get("/products").status_code == 200
    assert client.get("/examples").status_code == 200
    assert client.get("/push/vapid-key").status_code == 200

    resp = client.get("/products")
    assert resp.status_code == 429
    assert resp.json() == {"message": "Too many requests, please try again later"}

    assert client.get("/health").status_code == 200
    assert _login_attempt(client).status_code == 401


def test_timezone_formatter():
    formatter = TimezoneFormatter(fmt="%(asctime)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S %Z", tz_name="Asia/Kolkata")
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
    record.created = 0
    assert formatter.format(record) == "1970-01-01 05:30:00 IST hello"
