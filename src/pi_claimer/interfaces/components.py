"""Scanner, builder, submitter and scheduler protocols."""

from __future__ import annotations

from typing import Protocol

from stellar_sdk import Keypair

from pi_claimer.models.records import ClaimableBalance, CycleReport, Outcome, SponsoredClaim


class BalanceScanner(Protocol):
    """Finds claimable balances owned by the claimant."""

    async def scan(self, claimant_address: str) -> list[ClaimableBalance]:
        """One bounded page of claimable balances. Empty when there is no work."""
        ...


class ClaimBuilder(Protocol):
    """Composes a sponsored claim-and-send transaction."""

    async def build(
        self,
        claimant: Keypair,
        sponsor: Keypair,
        balance: ClaimableBalance,
        destination: str,
    ) -> SponsoredClaim:
        """Inner claim+pay signed by claimant, wrapped in a fee-bump signed by sponsor."""
        ...

    def confirm(self, sequence: int) -> None:
        """Record that a transaction using ``sequence`` was accepted."""
        ...


class ClaimSubmitter(Protocol):
    """Submits a sponsored claim once and classifies the result."""

    async def submit(self, claim: SponsoredClaim) -> Outcome:
        ...


class Scheduler(Protocol):
    """Chooses the pause between cycles."""

    def next_delay(self, report: CycleReport) -> float:
        ...
