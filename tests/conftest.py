# tests/conftest.py
import os
import sys

# Ensure root import
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth_service.emailer import get_email_sender
from auth_service.errors import EmailDeliveryError
from cli_admin import create_or_promote_admin
from config import Config


class LocalTestConfig(Config):
    AUTH_SECRET_KEY = "test-secret-key"
    DATABASE_URL = "sqlite://"
    RATE_LIMIT_ENABLED = False
    SENDGRID_API_KEY = None
    MAIL_FROM_EMAIL = None
    IMAGEKIT_PUBLIC_KEY = None
    IMAGEKIT_PRIVATE_KEY = None
    VAPID_PUBLIC_KEY = "test-public-vapid-key"
    VAPID_PRIVATE_KEY = None
    LOG_LEVEL = "WARNING"


class RecordingEmailSender:
    """Keeps every outgoing email in memory instead of calling SendGrid."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def _record(self, kind, email, **fields):
        if self.fail:
            raise EmailDeliveryError(f"Failed to send email to {email}")
        self.sent.append({"kind": kind, "email": email, **fields})

    async def send_otp(self, email, otp, name):
        await self._record("otp", email, otp=otp, name=name)

    async def send_password_reset_otp(self, email, otp, name):
        await self._record("reset", email, otp=otp, name=name)

    async def send_welcome(self, email, name):
        self.sent.append({"kind": "welcome", "email": email, "name": name})
        return True

    def last_code(self, email, kind="otp"):
        for message in reversed(self.sent):
            if message["email"] == email and message["kind"] == kind:
                return message["otp"]
        raise AssertionError(f"No {kind} email sent to {email}")


@pytest.fixture
def app():
    return create_app(LocalTestConfig)


@pytest.fixture
def outbox(app):
    sender = RecordingEmailSender()
    app.dependency_overrides[get_email_sender] = lambda: sender
    return sender


@pytest.fixture
def client(app, outbox):
    return TestClient(app)


@pytest.fixture
def db_session(app):
    session = app.state.session_factory()
    yield session
    session.close()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, name="Alice", email="alice@example.com", password="secret1"):
    return client.post("/auth/register", json={"name": name, "email": email, "password": password})


def register_and_verify(client, outbox, name="Alice", email="alice@example.com", password="secret1"):
    resp = register(client, name, email, password)
    assert resp.status_code == 201, resp.json()
    otp = outbox.last_code(email)
    resp = client.post("/auth/verify-otp", json={"email": email, "otp": otp})
    assert resp.status_code == 200, resp.json()
    return resp.json()["token"]


@pytest.fixture
def user_token(client, outbox):
    return register_and_verify(client, outbox)


@pytest.fixture
def admin_token(app, client):
    create_or_promote_admin(app.state.session_factory, "Admin", "admin@example.com", "adminpass")
    resp = client.post("/auth/login", json={"email": "admin@example.com", "password": "adminpass"})
    assert resp.status_code == 200, resp.json()
    return resp.json()["token"]
