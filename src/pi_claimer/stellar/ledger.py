"""Horizon-backed LedgerService using stellar_sdk's async server."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from stellar_sdk import Account, FeeBumpTransactionEnvelope, ServerAsync
from stellar_sdk.client.aiohttp_client import AiohttpClient
from stellar_sdk.exceptions import BaseHorizonError
from stellar_sdk.exceptions import ConnectionError as SdkConnectionError

from pi_claimer.errors import LedgerQueryError

log = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429

# Failures of a read that say nothing about the request itself
QUERY_ERRORS = (SdkConnectionError, BaseHorizonError, asyncio.TimeoutError)


def query_error(what: str, exc: Exception, kind: type[LedgerQueryError] = LedgerQueryError) -> LedgerQueryError:
    """Translate a stellar_sdk failure into a LedgerQueryError (or subclass)."""
    if isinstance(exc, BaseHorizonError):
        detail = exc.title or exc.detail or ""
        return kind(
            f"{what}: HTTP {exc.status} {detail}".strip(),
            rate_limited=exc.status == HTTP_TOO_MANY_REQUESTS,
        )
    return kind(f"{what}: {exc or type(exc).__name__}")


class HorizonLedger:
    """Thin async wrapper over ServerAsync.

    One aiohttp session is reused across cycles and released by close().
    Errors from stellar_sdk propagate unchanged; callers classify them.
    """

    def __init__(self, horizon_url: str) -> None:
        self._horizon_url = horizon_url
        self._server = ServerAsync(horizon_url, client=AiohttpClient())

    @property
    def horizon_url(self) -> str:
        return self._horizon_url

    async def claimable_balances(self, claimant: str, limit: int) -> list[dict[str, Any]]:
        response = await (
            self._server.claimable_balances().for_claimant(claimant).limit(limit).call()
        )
        return response["_embedded"]["records"]

    async def load_account(self, address: str) -> Account:
        return await self._server.load_account(address)

    async def fetch_base_fee(self) -> int:
        return await self._server.fetch_base_fee()

    async def submit_transaction(self, envelope: FeeBumpTransactionEnvelope) -> dict[str, Any]:
        return await self._server.submit_transaction(envelope)

    async def close(self) -> None:
        """Close the underlying aiohttp session."""
        try:
            await self._server.close()
        except Exception as exc:
            log.debug("Closing Horizon session failed: %s", exc)
