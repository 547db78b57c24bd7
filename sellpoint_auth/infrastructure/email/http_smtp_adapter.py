from __future__ import annotations

from typing import Optional

import httpx

from sellpoint_auth.domain.ports.email_port import EmailPort


class HttpSmtpEmailAdapter(EmailPort):
    """Posts HTML mails to an HTTP mail relay (`POST {base_url}/send`)."""

    def __init__(
        self,
        base_url: str,
        *,
        sender: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._sender = sender
        self._send_path = send_path if send_path.startswith("/") else f"/{send_path}"
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        *,
        to: str,
        subject: str,
        html_body: str,
    ) -> None:
        url = f"{self._base_url}{self._send_path}"
        payload = {
            "from": self._sender,
            "to": [to],
            "subject": subject,
            "html": html_body,
        }

        try:
            resp = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise RuntimeError(f"SMTP HTTP error: {e}") from e
        if not resp.is_success:
            raise RuntimeError(f"SMTP responded {resp.status_code}: {resp.text[:200]}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
