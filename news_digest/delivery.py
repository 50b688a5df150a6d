from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .exceptions import DeliveryError

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramClient:
    """Sends one text message to a Telegram chat through the Bot API."""

    def __init__(
        self,
        *,
        token: str,
        chat_id: str,
        timeout: float = 30.0,
        parse_mode: Optional[str] = "Markdown",
        base_url: str = TELEGRAM_API_URL,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._token = token
        self.chat_id = chat_id
        self.timeout = timeout
        self.parse_mode = parse_mode
        self.base_url = base_url.rstrip("/")
        self._client = client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/bot{self._token}/sendMessage"

    def _redact(self, text: str) -> str:
        return text.replace(self._token, "***") if self._token else text

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.endpoint, json=payload, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.endpoint, json=payload)

    async def send_message(self, text: str) -> Dict[str, Any]:
        """
        Post ``text`` to the configured chat and return Telegram's JSON reply.

        Raises DeliveryError on transport errors, non-2xx replies and replies
        with ``"ok": false``. The bot token never appears in the error text.
        """
        payload: Dict[str, Any] = {"chat_id": self.chat_id, "text": text}
        if self.parse_mode:
            payload["parse_mode"] = self.parse_mode

        try:
            response = await self._post(payload)
        except httpx.HTTPError as e:
            raise DeliveryError(self._redact(f"Telegram API request failed: {e!r}")) from None

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success or not data.get("ok", False):
            description = data.get("description") or response.text[:200]
            raise DeliveryError(
                self._redact(f"Telegram API error: HTTP {response.status_code}: {description}")
            )

        logger.info("Message sent to Telegram chat %s", self.chat_id)
        return data
