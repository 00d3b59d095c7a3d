import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from reviewauth.app import create_app
from reviewauth.auth.authority import CredentialAuthority
from reviewauth.auth.passwords import KdfParams
from reviewauth.auth.store import InMemorySessionStore
from reviewauth.auth.users import InMemoryUserDirectory
from reviewauth.config import Settings

# Minimum argon2 cost; production cost makes the suite needlessly slow.
FAST_KDF = KdfParams(time_cost=1, memory_cost=8, parallelism=1)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture()
def fast_kdf() -> KdfParams:
    return FAST_KDF


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture()
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture()
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def authority(directory, store, clock) -> CredentialAuthority:
    return CredentialAuthority(directory, store, kdf=FAST_KDF, clock=clock)


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        secret_key="test-secret",
        users_path=tmp_path / "data" / "users.yml",
        admin_username="admin",
        admin_password="admin-pass-1",
        admin_handle="reviewhub",
        kdf=FAST_KDF,
    )


@pytest.fixture()
def app(settings, clock):
    return create_app(settings, clock=clock)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def admin_client(app) -> TestClient:
    c = TestClient(app)
    r = c.post("/api/login", json={"username": "admin", "password": "admin-pass-1"})
    assert r.status_code == 200
    return c
