from __future__ import annotations

import logging
from typing import Sequence

from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from sellpoint_auth.domain.ports.user_data_purge import UserDataPurgePort
from sellpoint_auth.infrastructure.db.common import transaction

logger = logging.getLogger(__name__)


class PgUserDataPurge(UserDataPurgePort):
    """
    Deletes rows keyed by `user_id` from tables owned by other services
    (favorites, cart). The table list comes from settings.purge_tables.
    """

    def __init__(self, pool: AsyncConnectionPool, tables: Sequence[str]) -> None:
        self._pool = pool
        self._tables = tuple(tables)

    async def purge(self, user_id: str) -> None:
        if not self._tables:
            return
        async with transaction(self._pool, "purge user data") as cur:
            for table in self._tables:
                # tables of services not deployed alongside us may not exist
                await cur.execute("SELECT to_regclass(%s)", (table,))
                row = await cur.fetchone()
                if row is None or row[0] is None:
                    logger.info("purge table missing, skipped", extra={"table": table})
                    continue
                await cur.execute(
                    sql.SQL("DELETE FROM {} WHERE user_id = %s").format(
                        sql.Identifier(table)
                    ),
                    (user_id,),
                )
                logger.info(
                    "user data purged",
                    extra={"table": table, "user_id": user_id, "rows": cur.rowcount},
                )
