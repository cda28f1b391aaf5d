"""LedgerService protocol - the Horizon calls the claimer depends on."""

from __future__ import annotations

from typing import Any, Protocol

from stellar_sdk import Account, FeeBumpTransactionEnvelope


class LedgerService(Protocol):
    """Read and submit access to a Horizon server.

    Implementations raise ``stellar_sdk.exceptions`` errors unchanged.
    """

    async def claimable_balances(self, claimant: str, limit: int) -> list[dict[str, Any]]:
        """One page of raw claimable balance records for ``claimant``."""
        ...

    async def load_account(self, address: str) -> Account:
        """Current account state, including the sequence number."""
        ...

    async def fetch_base_fee(self) -> int:
        """Current network base fee in stroops."""
        ...

    async def submit_transaction(self, envelope: FeeBumpTransactionEnvelope) -> dict[str, Any]:
        """Submit a signed envelope. Returns the Horizon response body."""
        ...

    async def close(self) -> None:
        ...
