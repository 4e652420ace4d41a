# tests/test_admin.py
from conftest import auth_header, register, register_and_verify

from auth_service.models import User
from cli_admin import create_or_promote_admin, main as cli_main


def _user_id(app, email):
    session = app.state.session_factory()
    try:
        return session.query(User).filter(User.email == email).first().id
    finally:
        session.close()


def test_admin_routes_reject_regular_users(client, user_token):
    resp = client.get("/admin/users", headers=auth_header(user_token))
    assert resp.status_code == 403


def test_list_users_paginates_and_filters(client, outbox, admin_token):
    for i in range(3):
        register(client, name=f"User {i}", email=f"user{i}@example.com")

    resp = client.get("/admin/users", params={"limit": 2}, headers=auth_header(admin_token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 4, "pages": 2}
    assert len(body["users"]) == 2
    # Newest first
    assert body["users"][0]["email"] == "user2@example.com"

    resp = client.get("/admin/users", params={"search": "USER1"}, headers=auth_header(admin_token))
    assert [u["email"] for u in resp.json()["users"]] == ["user1@example.com"]

    resp = client.get("/admin/users", params={"role": "admin"}, headers=auth_header(admin_token))
    assert [u["email"] for u in resp.json()["users"]] == ["admin@example.com"]

    resp = client.get("/admin/users", params={"isActive": "false"}, headers=auth_header(admin_token))
    assert resp.json()["users"] == []


def test_get_update_delete_user(app, client, outbox, admin_token):
    register(client)
    user_id = _user_id(app, "alice@example.com")

    resp = client.get(f"/admin/users/{user_id}", headers=auth_header(admin_token))
    assert resp.status_code == 200
    assert "password" not in resp.json()

    resp = client.put(
        f"/admin/users/{user_id}",
        json={"isVerified": True, "role": "admin", "bio": "promoted"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["isVerified"] is True and user["role"] == "admin" and user["bio"] == "promoted"

    resp = client.delete(f"/admin/users/{user_id}", headers=auth_header(admin_token))
    assert resp.status_code == 200
    assert client.get(f"/admin/users/{user_id}", headers=auth_header(admin_token)).status_code == 404


def test_admin_cannot_deactivate_or_delete_self(app, client, admin_token):
    admin_id = _user_id(app, "admin@example.com")
    resp = client.put(f"/admin/users/{admin_id}", json={"isActive": False}, headers=auth_header(admin_token))
    assert resp.status_code == 400
    resp = client.delete(f"/admin/users/{admin_id}", headers=auth_header(admin_token))
    assert resp.status_code == 400


def test_bulk_update_skips_caller(app, client, outbox, admin_token):
    register(client, email="one@example.com")
    register(client, email="two@example.com")
    ids = [_user_id(app, "one@example.com"), _user_id(app, "two@example.com")]
    admin_id = _user_id(app, "admin@example.com")

    resp = client.post(
        "/admin/users/bulk-update",
        json={"userIds": ids + [admin_id], "action": "deactivate"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 200
    assert resp.json()["modifiedCount"] == 2
    # Caller stays active and can keep working
    assert client.get("/admin/stats", headers=auth_header(admin_token)).json()["inactiveUsers"] == 2

    resp = client.post(
        "/admin/users/bulk-update",
        json={"userIds": ids, "action": "delete"},
        headers=auth_header(admin_token),
    )
    assert resp.json()["modifiedCount"] == 2

    resp = client.post(
        "/admin/users/bulk-update",
        json={"userIds": ids, "action": "explode"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 400
    resp = client.post(
        "/admin/users/bulk-update",
        json={"userIds": [], "action": "verify"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 400


def _verification_state(app, email):
    session = app.state.session_factory()
    try:
        user = session.query(User).filter(User.email == email).first()
        return user.is_verified, user.otp, user.otp_expiry
    finally:
        session.close()


def test_bulk_verify_clears_registration_otp(app, client, outbox, admin_token):
    register(client, name="Bob", email="bob@example.com")
    assert _verification_state(app, "bob@example.com")[1] is not None

    resp = client.post(
        "/admin/users/bulk-update",
        json={"userIds": [_user_id(app, "bob@example.com")], "action": "verify"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 200
    assert _verification_state(app, "bob@example.com") == (True, None, None)


def test_admin_verify_clears_registration_otp(app, client, outbox, admin_token):
    register(client, name="Bob", email="bob@example.com")
    otp = outbox.last_code("bob@example.com")

    resp = client.put(
        f"/admin/users/{_user_id(app, 'bob@example.com')}",
        json={"isVerified": True},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 200
    assert _verification_state(app, "bob@example.com") == (True, None, None)

    resp = client.post("/auth/verify-otp", json={"email": "bob@example.com", "otp": otp})
    assert resp.status_code == 400


def test_admin_update_ignores_blank_name(app, client, outbox, admin_token):
    register(client, name="Bob", email="bob@example.com")
    user_id = _user_id(app, "bob@example.com")

    for name in ("", "   ", None):
        resp = client.put(f"/admin/users/{user_id}", json={"name": name}, headers=auth_header(admin_token))
        assert resp.status_code == 200
        assert resp.json()["user"]["name"] == "Bob"


def test_stats(client, outbox, admin_token):
    register_and_verify(client, outbox)
    register(client, email="pending@example.com")

    stats = client.get("/admin/stats", headers=auth_header(admin_token)).json()
    assert stats == {
        "totalUsers": 3,
        "activeUsers": 3,
        "inactiveUsers": 0,
        "verifiedUsers": 2,
        "unverifiedUsers": 1,
        "adminUsers": 1,
        "regularUsers": 2,
        "recentUsers": 3,
    }


def test_cli_promotes_existing_user(app, client, outbox):
    register(client)
    user_id, created = create_or_promote_admin(app.state.session_factory, "", "Alice@example.com")
    assert created is False
    assert user_id == _user_id(app, "alice@example.com")

    # Promotion also verifies, so the original password now logs in as admin
    resp = client.post("/auth/login", json={"email": "alice@example.com", "password": "secret1"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"


def test_cli_main_creates_admin(tmp_path, capsys):
    database_url = f"sqlite:///{tmp_path / 'cli.db'}"
    assert cli_main(["--email", "root@example.com", "--password", "rootpass", "--database-url", database_url]) == 0
    assert "Created admin root@example.com" in capsys.readouterr().out

    assert cli_main(["--email", "root@example.com", "--database-url", database_url]) == 0
    assert "Promoted admin root@example.com" in capsys.readouterr().out
