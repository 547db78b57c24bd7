from typing import Protocol


class SessionNotifierPort(Protocol):
    async def notify_forced_logout(self, session_id: str) -> None:
        """
        Tell the client connected with this session that it was logged out.
        No-op if no client is connected.
        """
