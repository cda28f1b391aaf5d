"""Sponsored claim builder - claim + pay, wrapped in a sponsor fee-bump.

The claimant signs an inner transaction with fee 0 that claims the balance
and pays the full amount to the destination. The sponsor wraps it in a
fee-bump envelope and signs only that. The claimant therefore never needs
spendable funds.
"""

from __future__ import annotations

import logging

from stellar_sdk import Asset, Keypair, TransactionBuilder

from pi_claimer.errors import FeeFetchError, StaleSequenceError
from pi_claimer.interfaces.ledger import LedgerService
from pi_claimer.models.records import ClaimableBalance, SponsoredClaim
from pi_claimer.stellar.ledger import QUERY_ERRORS, query_error

log = logging.getLogger(__name__)


class SponsoredClaimBuilder:
    """Builds a fresh SponsoredClaim for one balance.

    Nothing is cached between builds except the highest sequence number the
    daemon has seen accepted, which guards against a Horizon view that lags
    behind our own last submission.
    """

    def __init__(
        self,
        ledger: LedgerService,
        network_passphrase: str,
        fee_multiplier: int = 2,
        tx_timeout: int = 60,
    ) -> None:
        self._ledger = ledger
        self._network_passphrase = network_passphrase
        self._fee_multiplier = fee_multiplier
        self._tx_timeout = tx_timeout
        self._confirmed_sequence = 0

    @property
    def confirmed_sequence(self) -> int:
        return self._confirmed_sequence

    def confirm(self, sequence: int) -> None:
        """Record that a transaction using ``sequence`` was accepted."""
        self._confirmed_sequence = max(self._confirmed_sequence, sequence)

    async def build(
        self,
        claimant: Keypair,
        sponsor: Keypair,
        balance: ClaimableBalance,
        destination: str,
    ) -> SponsoredClaim:
        # 1. Fresh sequence snapshot for the claimant
        try:
            account = await self._ledger.load_account(claimant.public_key)
        except QUERY_ERRORS as exc:
            raise query_error("claimant account load failed", exc) from exc

        next_sequence = account.sequence + 1
        if next_sequence <= self._confirmed_sequence:
            raise StaleSequenceError(claimant.public_key, account.sequence, self._confirmed_sequence)

        # 2. Inner transaction: claim, then pay everything out. Fee 0.
        inner = (
            TransactionBuilder(
                source_account=account,
                network_passphrase=self._network_passphrase,
                base_fee=0,
            )
            .append_claim_claimable_balance_op(balance_id=balance.balance_id)
            .append_payment_op(
                destination=destination,
                asset=Asset.native(),
                amount=balance.amount,
            )
            .set_timeout(self._tx_timeout)
            .build()
        )
        inner.sign(claimant)

        # 3. Network base fee
        try:
            base_fee = await self._ledger.fetch_base_fee()
        except QUERY_ERRORS as exc:
            raise query_error("base fee fetch failed", exc, kind=FeeFetchError) from exc

        # 4. Sponsor fee-bump, signed by the sponsor only
        bid = base_fee * self._fee_multiplier
        envelope = TransactionBuilder.build_fee_bump_transaction(
            fee_source=sponsor,
            base_fee=bid,
            inner_transaction_envelope=inner,
            network_passphrase=self._network_passphrase,
        )
        envelope.sign(sponsor)

        log.debug(
            "Built sponsored claim for %s... (amount=%s seq=%d bid=%d)",
            balance.balance_id[:16], balance.amount, next_sequence, bid,
        )
        return SponsoredClaim(
            balance=balance,
            envelope=envelope,
            inner=inner,
            sequence=next_sequence,
            base_fee=base_fee,
            bid=bid,
        )
