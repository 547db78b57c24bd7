from __future__ import annotations

from typing import Protocol


class EmailPort(Protocol):
    async def send(
        self,
        *,
        to: str,
        subject: str,
        html_body: str,
    ) -> None:
        """Send an HTML email. Raises on delivery failure."""
