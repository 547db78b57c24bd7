from __future__ import annotations

from typing import Optional

from psycopg_pool import AsyncConnectionPool

from sellpoint_auth.domain.entities import User
from sellpoint_auth.domain.ports.user_repository import UserRepositoryPort
from sellpoint_auth.infrastructure.db.common import transaction

_COLUMNS = "id, username, email, password_hash, roles, email_confirmed, created_at"


def _row_to_user(row: tuple) -> User:
    id_, username, email, password_hash, roles, email_confirmed, created_at = row
    return User(
        id=str(id_),
        username=str(username),
        email=email,
        password_hash=password_hash,
        roles=list(roles or []),
        email_confirmed=bool(email_confirmed),
        created_at=created_at,
    )


class PgUserRepository(UserRepositoryPort):
    """
    Postgres implementation of UserRepositoryPort.

    Each call borrows a pooled connection for one short transaction.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def get_by_id(self, user_id: str) -> Optional[User]:
        sql = f"SELECT {_COLUMNS} FROM users WHERE id = %s"
        async with transaction(self._pool, "get user") as cur:
            await cur.execute(sql, (user_id,))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def get_by_email(self, email: str) -> Optional[User]:
        sql = f"SELECT {_COLUMNS} FROM users WHERE email = LOWER(TRIM(%s))"
        async with transaction(self._pool, "get user by email") as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def find_by_identifier(self, identifier: str) -> Optional[User]:
        # a NULL email compares as NULL, which must not outrank a real match
        sql = f"""
        SELECT {_COLUMNS}
        FROM users
        WHERE email = LOWER(TRIM(%s)) OR username = TRIM(%s)
        ORDER BY (email = LOWER(TRIM(%s))) IS TRUE DESC
        LIMIT 1
        """
        async with transaction(self._pool, "find user") as cur:
            await cur.execute(sql, (identifier, identifier, identifier))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def create(self, user: User) -> bool:
        sql = f"""
        INSERT INTO users ({_COLUMNS})
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        ON CONFLICT DO NOTHING
        """
        async with transaction(self._pool, "create user") as cur:
            await cur.execute(
                sql,
                (
                    user.id,
                    user.username,
                    user.email,
                    user.password_hash,
                    list(user.roles),
                    user.email_confirmed,
                    user.created_at,
                ),
            )
            return cur.rowcount == 1

    async def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        sql = "UPDATE users SET password_hash = %s WHERE id = %s"
        async with transaction(self._pool, "set password") as cur:
            await cur.execute(sql, (password_hash, user_id))
            return cur.rowcount == 1

    async def confirm_email(self, user_id: str) -> bool:
        sql = "UPDATE users SET email_confirmed = TRUE WHERE id = %s"
        async with transaction(self._pool, "confirm email") as cur:
            await cur.execute(sql, (user_id,))
            return cur.rowcount == 1

    async def add_role(self, user_id: str, role: str) -> bool:
        sql = """
        UPDATE users
        SET roles = array_append(roles, %s)
        WHERE id = %s AND NOT (%s = ANY(roles))
        """
        async with transaction(self._pool, "add role") as cur:
            await cur.execute(sql, (role, user_id, role))
            return cur.rowcount == 1

    async def remove_role(self, user_id: str, role: str) -> bool:
        sql = """
        UPDATE users
        SET roles = array_remove(roles, %s)
        WHERE id = %s AND %s = ANY(roles)
        """
        async with transaction(self._pool, "remove role") as cur:
            await cur.execute(sql, (role, user_id, role))
            return cur.rowcount == 1

    async def delete(self, user_id: str) -> bool:
        async with transaction(self._pool, "delete user") as cur:
            await cur.execute("DELETE FROM users WHERE id = %s", (user_id,))
            return cur.rowcount == 1
