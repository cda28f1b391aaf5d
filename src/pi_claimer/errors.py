"""Exception taxonomy for the claimer.

Ledger rejections and transient submission failures are not exceptions: the
submitter returns them as ``Outcome`` values. The classes below cover the
failures that stop a startup, a cycle, or a single balance attempt.
"""

from __future__ import annotations


class ClaimerError(Exception):
    """Base class for all pi_claimer errors."""


class ConfigError(ClaimerError):
    """Required configuration is missing or invalid. Fatal at startup."""


class InvalidPhrase(ClaimerError):
    """A recovery phrase failed BIP-39 checksum validation. Fatal at startup."""


class LedgerQueryError(ClaimerError):
    """A read against the ledger failed (connectivity, HTTP status, 404)."""

    def __init__(self, message: str, rate_limited: bool = False) -> None:
        super().__init__(message)
        self.rate_limited = rate_limited


class FeeFetchError(LedgerQueryError):
    """The network base fee could not be fetched."""


class StaleSequenceError(ClaimerError):
    """The account sequence snapshot is behind a sequence already consumed.

    A transaction built on it would fail with ``tx_bad_seq``; the caller must
    abandon the attempt and rebuild from a fresh snapshot later.
    """

    def __init__(self, account_id: str, snapshot: int, confirmed: int) -> None:
        super().__init__(
            f"sequence snapshot {snapshot} for {account_id[:8]}... "
            f"is not past confirmed sequence {confirmed}"
        )
        self.account_id = account_id
        self.snapshot = snapshot
        self.confirmed = confirmed
