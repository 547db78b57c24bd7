from __future__ import annotations

from datetime import datetime
from typing import Optional

from psycopg_pool import AsyncConnectionPool

from sellpoint_auth.domain.entities import DeviceFingerprint, RoleChange, Session
from sellpoint_auth.domain.ports.session_repository import SessionRepositoryPort
from sellpoint_auth.infrastructure.db.common import transaction

_COLUMNS = "id, user_id, browser, os, device, created_at, expires_at, is_revoked, roles"

_INSERT = f"""
INSERT INTO user_sessions ({_COLUMNS})
VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
"""


def _row_to_session(row: tuple) -> Session:
    id_, user_id, browser, os_, device, created_at, expires_at, is_revoked, roles = row
    return Session(
        id=str(id_),
        user_id=str(user_id),
        device=DeviceFingerprint(browser=browser, os=os_, device=device),
        created_at=created_at,
        expires_at=expires_at,
        is_revoked=bool(is_revoked),
        roles=list(roles or []),
    )


def _session_params(session: Session) -> tuple:
    return (
        session.id,
        session.user_id,
        session.device.browser,
        session.device.os,
        session.device.device,
        session.created_at,
        session.expires_at,
        session.is_revoked,
        list(session.roles),
    )


class PgSessionRepository(SessionRepositoryPort):
    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def create(self, session: Session) -> bool:
        async with transaction(self._pool, "create session") as cur:
            await cur.execute(_INSERT, _session_params(session))
            return cur.rowcount == 1

    async def get(self, session_id: str) -> Optional[Session]:
        sql = f"SELECT {_COLUMNS} FROM user_sessions WHERE id = %s"
        async with transaction(self._pool, "get session") as cur:
            await cur.execute(sql, (session_id,))
            row = await cur.fetchone()
        return _row_to_session(row) if row else None

    async def list_for_user(self, user_id: str) -> list[Session]:
        sql = f"""
        SELECT {_COLUMNS}
        FROM user_sessions
        WHERE user_id = %s
        ORDER BY created_at
        """
        async with transaction(self._pool, "list sessions") as cur:
            await cur.execute(sql, (user_id,))
            rows = await cur.fetchall()
        return [_row_to_session(r) for r in rows]

    async def extend(self, session_id: str, expires_at: datetime, *, now: datetime) -> bool:
        sql = """
        UPDATE user_sessions
        SET expires_at = %s
        WHERE id = %s AND NOT is_revoked AND expires_at > %s
        """
        async with transaction(self._pool, "extend session") as cur:
            await cur.execute(sql, (expires_at, session_id, now))
            return cur.rowcount == 1

    async def revoke(self, session_id: str) -> bool:
        sql = "UPDATE user_sessions SET is_revoked = TRUE WHERE id = %s"
        async with transaction(self._pool, "revoke session") as cur:
            await cur.execute(sql, (session_id,))
            return cur.rowcount == 1

    async def revoke_all_for_user(self, user_id: str) -> list[Session]:
        sql = f"""
        UPDATE user_sessions
        SET is_revoked = TRUE
        WHERE user_id = %s AND NOT is_revoked
        RETURNING {_COLUMNS}
        """
        async with transaction(self._pool, "revoke sessions") as cur:
            await cur.execute(sql, (user_id,))
            rows = await cur.fetchall()
        return [_row_to_session(r) for r in rows]

    async def apply_role_change(self, user_id: str, role: str, change: RoleChange) -> int:
        if change is RoleChange.ADDED:
            sql = """
            UPDATE user_sessions
            SET roles = array_append(roles, %s)
            WHERE user_id = %s AND NOT (%s = ANY(roles))
            """
        else:
            sql = """
            UPDATE user_sessions
            SET roles = array_remove(roles, %s)
            WHERE user_id = %s AND %s = ANY(roles)
            """
        async with transaction(self._pool, "update session roles") as cur:
            await cur.execute(sql, (role, user_id, role))
            return cur.rowcount

    async def delete_for_user(self, user_id: str) -> int:
        async with transaction(self._pool, "delete sessions") as cur:
            await cur.execute("DELETE FROM user_sessions WHERE user_id = %s", (user_id,))
            return cur.rowcount
