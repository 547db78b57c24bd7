from __future__ import annotations

from typing import Optional

from psycopg_pool import AsyncConnectionPool

from sellpoint_auth.domain.entities import Ban, BanScope
from sellpoint_auth.domain.ports.ban_repository import BanRepositoryPort
from sellpoint_auth.infrastructure.db.common import transaction

_COLUMNS = "id, user_id, admin_id, reason, banned_at, banned_until, scope"


def _row_to_ban(row: tuple) -> Ban:
    id_, user_id, admin_id, reason, banned_at, banned_until, scope = row
    return Ban(
        id=str(id_),
        user_id=str(user_id),
        admin_id=str(admin_id),
        reason=reason,
        banned_at=banned_at,
        banned_until=banned_until,
        scope=BanScope(int(scope)),
    )


class PgBanRepository(BanRepositoryPort):
    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def create(self, ban: Ban) -> bool:
        sql = f"""
        INSERT INTO user_bans ({_COLUMNS})
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        """
        async with transaction(self._pool, "create ban") as cur:
            await cur.execute(
                sql,
                (
                    ban.id,
                    ban.user_id,
                    ban.admin_id,
                    ban.reason,
                    ban.banned_at,
                    ban.banned_until,
                    int(ban.scope),
                ),
            )
            return cur.rowcount == 1

    async def get(self, ban_id: str) -> Optional[Ban]:
        sql = f"SELECT {_COLUMNS} FROM user_bans WHERE id = %s"
        async with transaction(self._pool, "get ban") as cur:
            await cur.execute(sql, (ban_id,))
            row = await cur.fetchone()
        return _row_to_ban(row) if row else None

    async def list_for_user(self, user_id: str) -> list[Ban]:
        sql = f"""
        SELECT {_COLUMNS}
        FROM user_bans
        WHERE user_id = %s
        ORDER BY banned_at DESC
        """
        async with transaction(self._pool, "list bans") as cur:
            await cur.execute(sql, (user_id,))
            rows = await cur.fetchall()
        return [_row_to_ban(r) for r in rows]

    async def delete(self, ban_id: str) -> bool:
        async with transaction(self._pool, "delete ban") as cur:
            await cur.execute("DELETE FROM user_bans WHERE id = %s", (ban_id,))
            return cur.rowcount == 1
