"""Ledger entities, submission outcomes and cycle reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from stellar_sdk import FeeBumpTransactionEnvelope, TransactionEnvelope

NATIVE_ASSET = "native"


@dataclass(frozen=True)
class ClaimableBalance:
    """A claimable balance as reported by Horizon."""

    balance_id: str
    amount: str  # decimal string, 7 places
    asset: str = NATIVE_ASSET  # "native" or "CODE:ISSUER"
    claimants: tuple[dict[str, Any], ...] = ()
    sponsor: str | None = None
    last_modified_ledger: int = 0

    @classmethod
    def from_horizon(cls, record: dict[str, Any]) -> ClaimableBalance:
        return cls(
            balance_id=record["id"],
            amount=record["amount"],
            asset=record.get("asset", NATIVE_ASSET),
            claimants=tuple(record.get("claimants", [])),
            sponsor=record.get("sponsor"),
            last_modified_ledger=int(record.get("last_modified_ledger", 0)),
        )

    @property
    def is_native(self) -> bool:
        return self.asset == NATIVE_ASSET

    def predicate_for(self, address: str) -> dict[str, Any] | None:
        """The claim predicate that applies to ``address``, if it is a claimant."""
        for claimant in self.claimants:
            if claimant.get("destination") == address:
                return claimant.get("predicate", {})
        return None


@dataclass
class SponsoredClaim:
    """A fully signed fee-bump envelope ready for one submission."""

    balance: ClaimableBalance
    envelope: FeeBumpTransactionEnvelope
    inner: TransactionEnvelope
    sequence: int  # sequence number consumed by the inner transaction
    base_fee: int  # network base fee at build time, stroops
    bid: int  # per-operation fee-bump bid, stroops


@dataclass(frozen=True)
class Success:
    """The ledger accepted the sponsored transaction."""

    balance_id: str
    amount: str
    tx_hash: str


@dataclass(frozen=True)
class Rejected:
    """The ledger rejected the transaction. Terminal for this attempt."""

    balance_id: str
    result_code: str  # most specific transaction-level code
    transaction_code: str = ""  # outer code as reported
    operation_codes: tuple[str, ...] = ()
    result_xdr: str | None = None


@dataclass(frozen=True)
class TransientFailure:
    """The submission did not reach a verdict (transport, 5xx, 429)."""

    balance_id: str
    cause: str
    rate_limited: bool = False


Outcome = Union[Success, Rejected, TransientFailure]


@dataclass
class CycleReport:
    """Tally of one scan-build-submit cycle."""

    started_at: str
    found: int = 0
    claimed: int = 0
    rejected: int = 0
    transient: int = 0
    stale: int = 0
    errors: int = 0  # unexpected per-balance failures
    rate_limited: bool = False
    aborted: str | None = None  # reason the cycle ended early
    duration_ms: int = 0
    outcomes: list[Outcome] = field(default_factory=list)

    @property
    def troubled(self) -> bool:
        """True when the cycle hit a transient condition worth backing off for."""
        return self.aborted is not None or self.transient > 0 or self.rate_limited
