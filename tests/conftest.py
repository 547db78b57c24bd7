from datetime import timedelta

import pytest

from sellpoint_auth.application.sessions import SessionManager
from sellpoint_auth.domain.entities import ROLE_ADMIN, ROLE_USER, User
from sellpoint_auth.infrastructure.cache.memory import InMemoryVerificationCache
from tests.fakes import (
    FakeBanRepo,
    FakeClock,
    FakeEmailOK,
    FakeHasher,
    FakeNotifier,
    FakePurge,
    FakeSessionRepo,
    FakeUserRepo,
)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def alice() -> User:
    return User(
        id="u-alice",
        username="alice",
        email="Alice@Example.com",
        password_hash="hashed-s3cret",
        roles=[ROLE_USER],
    )


@pytest.fixture()
def admin() -> User:
    return User(
        id="u-admin",
        username="root",
        email="admin@example.com",
        password_hash="hashed-adm1n",
        roles=[ROLE_USER, ROLE_ADMIN],
    )


@pytest.fixture()
def users(alice, admin):
    return FakeUserRepo(alice, admin)


@pytest.fixture()
def sessions():
    return FakeSessionRepo()


@pytest.fixture()
def bans_repo():
    return FakeBanRepo()


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def email():
    return FakeEmailOK()


@pytest.fixture()
def hasher():
    return FakeHasher()


@pytest.fixture()
def purge():
    return FakePurge()


@pytest.fixture()
def cache():
    return InMemoryVerificationCache()


@pytest.fixture()
def session_manager(sessions, users, notifier, clock):
    return SessionManager(
        sessions=sessions,
        users=users,
        notifier=notifier,
        ttl=timedelta(hours=168),
        clock=clock,
    )


@pytest.fixture(autouse=True)
def patch_code(monkeypatch):
    """
    Make the mailed code deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from sellpoint_auth.domain import services as domain_services

    monkeypatch.setattr(domain_services, "generate_code", lambda length=6: "AB12CD")
    yield
