import pytest
from fastapi.testclient import TestClient

from sellpoint_auth.infrastructure.cache.memory import InMemoryVerificationCache
from sellpoint_auth.infrastructure.realtime.connections import SessionConnectionRegistry
from sellpoint_auth.main import create_app
from sellpoint_auth.settings import Settings
from sellpoint_auth.wiring import build_services
from tests.fakes import (
    FakeBanRepo,
    FakeEmailOK,
    FakeHasher,
    FakePurge,
    FakeSessionRepo,
)

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SAFARI_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)


@pytest.fixture()
def app_and_deps(users):
    """
    App with every collaborator replaced by an in-memory fake. The lifespan
    is not run (no `with TestClient(...)`), so nothing touches PG or Redis.
    """
    app = create_app()
    deps = {
        "users": users,
        "sessions": FakeSessionRepo(),
        "bans": FakeBanRepo(),
        "cache": InMemoryVerificationCache(),
        "email": FakeEmailOK(),
        "hasher": FakeHasher(),
        "purge": FakePurge(),
        "connections": SessionConnectionRegistry(),
    }
    app.state.services = build_services(Settings(), **deps)
    yield app, deps


@pytest.fixture()
def client(app_and_deps):
    app, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def deps(app_and_deps):
    return app_and_deps[1]


def login(client: TestClient, identifier: str, password: str, ua: str = CHROME_UA):
    return client.post(
        "/v1/auth/login",
        json={"login": identifier, "password": password},
        headers={"User-Agent": ua},
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def alice_token(client) -> str:
    r = login(client, "alice", "s3cret")
    assert r.status_code == 200, r.text
    return r.json()["token"]


@pytest.fixture()
def admin_token(client) -> str:
    r = login(client, "root", "adm1n")
    assert r.status_code == 200, r.text
    return r.json()["token"]
