"""Telegram notifier - best-effort operator alerts over the Bot API."""

from __future__ import annotations

import logging

import httpx

log = logging.getLogger(__name__)


class TelegramNotifier:
    """Posts messages to a Telegram chat via ``sendMessage``.

    Without both a bot token and a chat id the notifier is disabled and
    ``notify`` is a no-op. Delivery failures are logged and swallowed.
    """

    def __init__(
        self,
        bot_token: str = "",
        chat_id: str = "",
        api_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._url = f"{api_url.rstrip('/')}/bot{bot_token}/sendMessage"
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=5),
                transport=self._transport,
            )
        return self._client

    async def notify(self, message: str) -> bool:
        if not self.enabled:
            return False

        payload = {
            "chat_id": self._chat_id,
            "text": message,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
        }
        try:
            resp = await self._get_client().post(self._url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.warning("Telegram notification rejected: HTTP %d", exc.response.status_code)
            return False
        except httpx.HTTPError as exc:
            # the request URL carries the bot token; keep it out of the log
            log.warning("Telegram notification failed: %s", type(exc).__name__)
            return False
        return True

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
