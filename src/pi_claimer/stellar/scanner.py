"""Balance scanner - finds claimable balances owned by the claimant."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from pi_claimer.interfaces.ledger import LedgerService
from pi_claimer.models.records import ClaimableBalance
from pi_claimer.stellar.ledger import QUERY_ERRORS, query_error
from pi_claimer.stellar.predicates import is_claimable, unlocks_at

log = logging.getLogger(__name__)


class HorizonBalanceScanner:
    """Reads one page of claimable balances for an address.

    An empty list is the normal idle state. With ``skip_locked`` set, balances
    whose predicate is not yet satisfied, or that are not in the native
    asset, are left out.
    """

    def __init__(
        self,
        ledger: LedgerService,
        page_size: int = 10,
        skip_locked: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._ledger = ledger
        self._page_size = page_size
        self._skip_locked = skip_locked
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def scan(self, claimant_address: str) -> list[ClaimableBalance]:
        try:
            records = await self._ledger.claimable_balances(claimant_address, self._page_size)
        except QUERY_ERRORS as exc:
            raise query_error("claimable balance query failed", exc) from exc

        balances = [ClaimableBalance.from_horizon(r) for r in records]
        if not self._skip_locked:
            return balances

        now = self._clock()
        ready = []
        for balance in balances:
            if not balance.is_native:
                log.warning(
                    "Skipping balance %s...: asset %s is not native",
                    balance.balance_id[:16], balance.asset,
                )
                continue
            predicate = balance.predicate_for(claimant_address)
            try:
                claimable = is_claimable(predicate, now)
            except ValueError as exc:
                log.warning("Balance %s...: %s, letting the ledger decide", balance.balance_id[:16], exc)
                claimable = True
            if not claimable:
                unlock = unlocks_at(predicate)
                log.debug(
                    "Balance %s... (%s) locked until %s",
                    balance.balance_id[:16],
                    balance.amount,
                    unlock.isoformat() if unlock else "?",
                )
                continue
            ready.append(balance)
        return ready
