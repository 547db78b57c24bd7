from __future__ import annotations

import logging
from typing import Any, Protocol

from sellpoint_auth.domain.ports.session_notifier import SessionNotifierPort

logger = logging.getLogger(__name__)

FORCE_LOGOUT_EVENT = {"event": "ForceLogout", "message": "Your session was terminated"}
# application-defined websocket close code (4000-4999 range)
FORCE_LOGOUT_CLOSE_CODE = 4001


class PushConnection(Protocol):
    async def send_json(self, data: Any) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class SessionConnectionRegistry(SessionNotifierPort):
    """
    Which live push connection belongs to which session, in this process.

    A session has at most one registered connection; registering again
    replaces the previous one.
    """

    def __init__(self) -> None:
        self._connections: dict[str, PushConnection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._connections

    def register(self, session_id: str, connection: PushConnection) -> None:
        self._connections[session_id] = connection
        logger.info("push connection registered", extra={"session_id": session_id})

    def unregister(self, session_id: str, connection: PushConnection | None = None) -> None:
        """Forget the session's connection (only if it is `connection`, when given)."""
        current = self._connections.get(session_id)
        if current is None:
            return
        if connection is not None and current is not connection:
            return
        del self._connections[session_id]

    async def notify_forced_logout(self, session_id: str) -> None:
        connection = self._connections.pop(session_id, None)
        if connection is None:
            logger.info("no push connection for session", extra={"session_id": session_id})
            return
        try:
            await connection.send_json(FORCE_LOGOUT_EVENT)
        finally:
            await connection.close(code=FORCE_LOGOUT_CLOSE_CODE)
        logger.info("forced logout pushed", extra={"session_id": session_id})
