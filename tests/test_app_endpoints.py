from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from reviewauth.app import create_app
from reviewauth.auth.users import InMemoryUserDirectory
from reviewauth.config import Settings

from conftest import FAST_KDF

ALICE = {"username": "alice", "password": "hunter2x", "instagramHandle": "alice.shop"}


def _register(client, body=ALICE):
    return client.post("/api/register", json=body)


def test_register_then_login_scenario(client, app):
    r = _register(client)
    assert r.status_code == 201
    body = r.json()
    assert body["username"] == "alice"
    assert body["isAdmin"] is False
    assert "credential" not in body and "password" not in body
    assert app.state.settings.cookie_name in r.cookies

    fresh = TestClient(app)
    assert fresh.post("/api/login", json={"username": "alice", "password": "hunter2x"}).status_code == 200

    r = TestClient(app).post("/api/login", json={"username": "alice", "password": "hunter2y"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid credentials"}

    r = TestClient(app).post("/api/login", json={"username": "alice ", "password": "hunter2x"})
    assert r.status_code == 200
    assert r.json()["username"] == "alice"


def test_register_cannot_make_admin(client):
    r = _register(client, {**ALICE, "isAdmin": True, "is_admin": True})
    assert r.status_code == 201
    assert r.json()["isAdmin"] is False


def test_register_duplicate_is_specific(client):
    _register(client)
    r = TestClient(client.app).post("/api/register", json=ALICE)
    assert r.status_code == 400
    assert r.json() == {"error": "Username already exists"}


def test_register_validation_details(client):
    r = client.post("/api/register", json={"username": "a b", "password": "x", "instagramHandle": ".bad"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert {d["field"] for d in body["details"]} == {"username", "password", "instagramHandle"}


@pytest.mark.parametrize(
    "body",
    [
        {"username": "nobody", "password": "hunter2x"},
        {"username": "", "password": ""},
        {"username": "   ", "password": "hunter2x"},
        {},
        None,
    ],
)
def test_login_failures_are_uniform(client, body):
    _register(TestClient(client.app))
    r = client.post("/api/login", json=body) if body is not None else client.post("/api/login")
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid credentials"}


def test_remember_me_sets_long_cookie(client):
    _register(TestClient(client.app))
    short = client.post("/api/login", json={"username": "alice", "password": "hunter2x"})
    long = client.post("/api/login", json={"username": "alice", "password": "hunter2x", "rememberMe": True})
    assert f"Max-Age={7 * 24 * 3600}" in short.headers["set-cookie"]
    assert f"Max-Age={30 * 24 * 3600}" in long.headers["set-cookie"]
    assert "HttpOnly" in long.headers["set-cookie"]


def test_current_user_and_logout(client):
    assert client.get("/api/user").status_code == 401
    _register(client)
    r = client.get("/api/user")
    assert r.status_code == 200
    assert r.json()["username"] == "alice"

    token = client.cookies.get(client.app.state.settings.cookie_name)
    assert client.post("/api/logout").status_code == 200

    # Replaying the old cookie after logout must not work.
    replay = TestClient(client.app)
    replay.cookies.set(client.app.state.settings.cookie_name, token)
    r = replay.get("/api/user")
    assert r.status_code == 401
    assert r.json() == {"error": "Authentication required"}


def test_logout_without_session_is_ok(client):
    assert client.post("/api/logout").status_code == 200


def test_tampered_cookie_is_unauthenticated(client):
    _register(client)
    name = client.app.state.settings.cookie_name
    forged = TestClient(client.app)
    forged.cookies.set(name, client.cookies.get(name) + "tamper")
    assert forged.get("/api/user").status_code == 401


def test_session_expires(client, clock):
    _register(client)
    assert client.get("/api/user").status_code == 200
    clock.advance(timedelta(days=7, seconds=1))
    assert client.get("/api/user").status_code == 401


def test_admin_gate_distinguishes_unauthenticated_and_forbidden(client, admin_client):
    r = client.get("/api/admin/contact-messages")
    assert r.status_code == 401
    assert r.json() == {"error": "Authentication required"}

    _register(client)
    r = client.get("/api/admin/contact-messages")
    assert r.status_code == 403
    assert r.json() == {"error": "Admin access required"}

    r = admin_client.get("/api/admin/contact-messages")
    assert r.status_code == 200
    assert r.json() == []


def test_contact_message_flow(client, admin_client):
    r = client.post("/api/contact", json={"name": "Zoe", "email": "zoe@example.com", "message": "Please list my shop!"})
    assert r.status_code == 201
    assert r.json()["id"] == 1

    r = client.post("/api/contact", json={"name": "Zoe", "email": "zoe", "message": "short"})
    assert r.status_code == 400

    msgs = admin_client.get("/api/admin/contact-messages").json()
    assert [m["message"] for m in msgs] == ["Please list my shop!"]


def test_bootstrap_admin_is_idempotent_across_restarts(settings, clock):
    create_app(settings, clock=clock)
    create_app(settings, clock=clock)
    app = create_app(settings, clock=clock)
    admin = app.state.authority.directory.find_by_username("admin")
    assert admin.is_admin is True
    assert admin.id == 1
    assert admin.display_handle == "reviewhub"


def test_no_admin_password_skips_provisioning():
    directory = InMemoryUserDirectory()
    create_app(Settings(secret_key="s", users_path=None, kdf=FAST_KDF), directory=directory)
    assert directory.find_by_username("admin") is None


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


@pytest.mark.parametrize("content", ["[]", '"alice"', "42", "{not json", '{"username":"alice","password":"\\ud800abc"}'])
def test_login_odd_bodies_get_uniform_failure(client, content):
    _register(TestClient(client.app))
    r = client.post("/api/login", content=content, headers={"content-type": "application/json"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid credentials"}


@pytest.mark.parametrize("content", ["[]", '"alice"', "{not json"])
def test_register_odd_bodies_are_validation_failures(client, content):
    r = client.post("/api/register", content=content, headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Validation failed"


def test_identity_is_resolved_only_where_a_route_needs_it(settings, clock):
    class CountingDirectory(InMemoryUserDirectory):
        gets = 0

        def get(self, principal_id):
            CountingDirectory.gets += 1
            return super().get(principal_id)

    directory = CountingDirectory()
    c = TestClient(create_app(settings, directory=directory, clock=clock))
    assert c.post("/api/login", json={"username": "admin", "password": "admin-pass-1"}).status_code == 200
    assert c.get("/health").status_code == 200
    assert CountingDirectory.gets == 0
    assert c.get("/api/user").status_code == 200
    assert CountingDirectory.gets == 1
