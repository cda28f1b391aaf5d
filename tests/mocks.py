"""Mock implementations of the external-facing components."""

from __future__ import annotations

from typing import Any

from stellar_sdk import Account, FeeBumpTransactionEnvelope


class MockLedger:
    """Implements the LedgerService protocol in memory.

    A successful submission behaves like the ledger: the claimed balance
    disappears from later scans and the claimant's sequence advances.
    """

    def __init__(self, records: list[dict] | None = None, sequence: int = 1000, base_fee: int = 100_000) -> None:
        self.records: list[dict] = list(records or [])
        self.sequence = sequence
        self.base_fee = base_fee
        self.scan_error: Exception | None = None
        self.account_error: Exception | None = None
        self.fee_error: Exception | None = None
        self.submit_results: list[Any] = []  # queued dicts or exceptions
        self.submitted: list[FeeBumpTransactionEnvelope] = []
        self.scan_calls = 0
        self.load_calls = 0
        self.fee_calls = 0
        self.closed = False

    async def claimable_balances(self, claimant: str, limit: int) -> list[dict]:
        self.scan_calls += 1
        if self.scan_error is not None:
            raise self.scan_error
        return list(self.records[:limit])

    async def load_account(self, address: str) -> Account:
        self.load_calls += 1
        if self.account_error is not None:
            raise self.account_error
        return Account(address, self.sequence)

    async def fetch_base_fee(self) -> int:
        self.fee_calls += 1
        if self.fee_error is not None:
            raise self.fee_error
        return self.base_fee

    async def submit_transaction(self, envelope: FeeBumpTransactionEnvelope) -> dict:
        self.submitted.append(envelope)
        result = self.submit_results.pop(0) if self.submit_results else None
        if isinstance(result, Exception):
            raise result

        inner = envelope.transaction.inner_transaction_envelope.transaction
        self.sequence = inner.sequence
        claimed = inner.operations[0].balance_id
        self.records = [r for r in self.records if r["id"] != claimed]
        return result or {"hash": envelope.hash_hex(), "successful": True}

    async def close(self) -> None:
        self.closed = True

    def enqueue(self, *results: Any) -> None:
        """Test helper: stage results for the next submissions."""
        self.submit_results.extend(results)


class MockNotifier:
    """Implements the Notifier protocol, recording every message."""

    def __init__(self, enabled: bool = True, raise_exc: Exception | None = None) -> None:
        self._enabled = enabled
        self._raise = raise_exc
        self.messages: list[str] = []
        self.closed = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def notify(self, message: str) -> bool:
        if self._raise is not None:
            raise self._raise
        if not self._enabled:
            return False
        self.messages.append(message)
        return True

    async def close(self) -> None:
        self.closed = True
