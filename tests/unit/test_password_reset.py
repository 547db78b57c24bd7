import asyncio
import logging

import pytest

from sellpoint_auth.application.password_reset import (
    PasswordResetHandshake,
    access_code_key,
    reset_key,
)
from sellpoint_auth.application.roles import set_user_role
from sellpoint_auth.domain.entities import ROLE_ADMIN
from sellpoint_auth.domain.errors import InvalidCode, OperationFailed, UserNotFound


@pytest.fixture()
def handshake(cache, users, email, hasher):
    return PasswordResetHandshake(
        cache=cache, users=users, email=email, hasher=hasher
    )


@pytest.mark.asyncio
async def test_full_handshake_is_single_use_at_every_step(
    handshake, users, email, alice
):
    token = await handshake.request_reset("alice@example.com")
    assert token
    assert email.calls[0]["to"] == "alice@example.com"
    assert email.calls[0]["subject"] == "Reset Password"
    assert "AB12CD" in email.calls[0]["html_body"]

    access = await handshake.verify_code(token, "ab12cd")
    assert access
    assert await handshake.verify_code(token, "ab12cd") is None

    await handshake.commit("newPass123", access)
    assert users.by_id[alice.id].password_hash == "hashed-newPass123"

    with pytest.raises(InvalidCode):
        await handshake.commit("again", access)


@pytest.mark.asyncio
async def test_request_by_username_mails_the_account_email(handshake, email):
    assert await handshake.request_reset("  alice ") is not None
    assert email.calls[0]["to"] == "alice@example.com"


@pytest.mark.asyncio
async def test_unknown_identifier_sends_nothing(handshake, email, cache):
    assert await handshake.request_reset("nobody@example.com") is None
    assert email.calls == []
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_wrong_code_keeps_the_entry(handshake, cache):
    token = await handshake.request_reset("alice")
    assert await handshake.verify_code(token, "ZZZZZZ") is None
    assert await cache.try_get(reset_key(token)) is not None
    assert await handshake.verify_code(token, " ab12cd ") is not None


@pytest.mark.asyncio
async def test_unknown_token_fails_verification(handshake):
    assert await handshake.verify_code("not-a-token", "AB12CD") is None


@pytest.mark.asyncio
async def test_expired_code_fails_verification(users, email, hasher):
    from sellpoint_auth.infrastructure.cache.memory import InMemoryVerificationCache

    now = [0.0]
    cache = InMemoryVerificationCache(clock=lambda: now[0])
    handshake = PasswordResetHandshake(
        cache=cache, users=users, email=email, hasher=hasher, code_ttl_seconds=60
    )
    token = await handshake.request_reset("alice")
    now[0] = 61.0
    assert await handshake.verify_code(token, "AB12CD") is None


@pytest.mark.asyncio
async def test_access_code_is_stored_under_its_own_prefix(handshake, cache, alice):
    token = await handshake.request_reset("alice")
    access = await handshake.verify_code(token, "AB12CD")
    assert await cache.try_get(access_code_key(access)) == alice.id
    assert reset_key(token).startswith("reset-pass:")
    assert access_code_key(access).startswith("reset-pass-access-code:")


@pytest.mark.asyncio
async def test_commit_with_unknown_access_code(handshake):
    with pytest.raises(InvalidCode):
        await handshake.commit("whatever", "nope")


@pytest.mark.asyncio
async def test_commit_for_deleted_user(handshake, users, alice):
    token = await handshake.request_reset("alice")
    access = await handshake.verify_code(token, "AB12CD")
    await users.delete(alice.id)
    with pytest.raises(UserNotFound):
        await handshake.commit("newPass123", access)


@pytest.mark.asyncio
async def test_commit_unacknowledged_update(handshake, users):
    token = await handshake.request_reset("alice")
    access = await handshake.verify_code(token, "AB12CD")
    users.ack_writes = False
    with pytest.raises(OperationFailed):
        await handshake.commit("newPass123", access)


class _RelayDown:
    async def send(self, *, to: str, subject: str, html_body: str) -> None:
        raise RuntimeError("SMTP responded 503: unavailable")


@pytest.mark.asyncio
async def test_scheduled_request_hands_the_mail_over_unsent(handshake, email):
    jobs = []
    token = await handshake.request_reset(
        "alice", schedule=lambda fn, *args: jobs.append((fn, args))
    )
    assert token
    assert email.calls == []

    fn, args = jobs[0]
    await fn(*args)
    assert email.calls[0]["to"] == "alice@example.com"
    assert "AB12CD" in email.calls[0]["html_body"]
    assert await handshake.verify_code(token, "AB12CD")


@pytest.mark.asyncio
async def test_scheduled_mail_failure_is_logged(cache, users, hasher, caplog):
    handshake = PasswordResetHandshake(
        cache=cache, users=users, email=_RelayDown(), hasher=hasher
    )
    jobs = []
    token = await handshake.request_reset(
        "alice", schedule=lambda fn, *args: jobs.append((fn, args))
    )

    fn, args = jobs[0]
    with caplog.at_level(logging.WARNING):
        await fn(*args)
    assert "password reset mail failed" in caplog.text
    assert await cache.try_get(reset_key(token)) is not None


@pytest.mark.asyncio
async def test_unknown_account_schedules_nothing(handshake, email):
    jobs = []
    assert await handshake.request_reset("ghost", schedule=jobs.append) is None
    assert jobs == []


@pytest.mark.asyncio
async def test_commit_and_concurrent_role_grant_both_land(
    handshake, users, session_manager, alice
):
    token = await handshake.request_reset("alice")
    access = await handshake.verify_code(token, "AB12CD")
    users.yield_after_get = True

    # both read the same user before either writes
    await asyncio.gather(
        handshake.commit("newPass123", access),
        set_user_role(users, session_manager, alice.id, ROLE_ADMIN),
    )

    stored = users.by_id[alice.id]
    assert stored.password_hash == "hashed-newPass123"
    assert ROLE_ADMIN in stored.roles
    assert sorted(users.writes) == [(alice.id, "password_hash"), (alice.id, "roles")]
