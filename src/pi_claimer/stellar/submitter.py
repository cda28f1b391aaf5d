"""Claim submitter - sends a sponsored claim once and classifies the result."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from stellar_sdk.exceptions import BadRequestError, BaseHorizonError
from stellar_sdk.exceptions import ConnectionError as SdkConnectionError
from stellar_sdk.sep.exceptions import AccountRequiresMemoError

from pi_claimer.interfaces.ledger import LedgerService
from pi_claimer.models.records import Outcome, Rejected, SponsoredClaim, Success, TransientFailure
from pi_claimer.stellar.ledger import HTTP_TOO_MANY_REQUESTS

log = logging.getLogger(__name__)


def _rejection(balance_id: str, exc: BadRequestError) -> Rejected:
    """Pull result codes out of a Horizon 400 response.

    For a failed fee-bump the outer code is ``tx_fee_bump_inner_failed``;
    the inner transaction's code is the one worth reporting.
    """
    extras: dict[str, Any] = exc.extras or {}
    codes: dict[str, Any] = extras.get("result_codes") or {}
    tx_code = codes.get("transaction") or ""
    inner_code = codes.get("inner_transaction") or ""
    return Rejected(
        balance_id=balance_id,
        result_code=inner_code or tx_code or "bad_request",
        transaction_code=tx_code,
        operation_codes=tuple(codes.get("operations") or ()),
        result_xdr=exc.result_xdr,
    )


class HorizonClaimSubmitter:
    """Submits a fee-bump envelope exactly once.

    Never retries: a rejected envelope is dead, and a transport failure is
    left to the next cycle, which rebuilds from a fresh sequence snapshot.
    """

    def __init__(self, ledger: LedgerService) -> None:
        self._ledger = ledger

    async def submit(self, claim: SponsoredClaim) -> Outcome:
        balance_id = claim.balance.balance_id
        log.info(
            "Submitting sponsored claim for %s... (%s, seq=%d, bid=%d)",
            balance_id[:16], claim.balance.amount, claim.sequence, claim.bid,
        )

        try:
            response = await self._ledger.submit_transaction(claim.envelope)

        except AccountRequiresMemoError as exc:
            log.error("Destination %s requires a memo", exc.account_id[:16])
            return Rejected(balance_id=balance_id, result_code="account_requires_memo")

        except BadRequestError as exc:
            rejected = _rejection(balance_id, exc)
            log.error(
                "Claim rejected for %s...: %s (tx=%s ops=%s)",
                balance_id[:16],
                rejected.result_code,
                rejected.transaction_code or "?",
                ",".join(rejected.operation_codes) or "-",
            )
            return rejected

        except BaseHorizonError as exc:
            rate_limited = exc.status == HTTP_TOO_MANY_REQUESTS
            cause = "rate limited" if rate_limited else f"HTTP {exc.status} {exc.title or ''}".strip()
            log.warning("Claim submission for %s... not settled: %s", balance_id[:16], cause)
            return TransientFailure(balance_id=balance_id, cause=cause, rate_limited=rate_limited)

        except (SdkConnectionError, asyncio.TimeoutError) as exc:
            cause = f"connection error: {exc or type(exc).__name__}"
            log.warning("Claim submission for %s... not settled: %s", balance_id[:16], cause)
            return TransientFailure(balance_id=balance_id, cause=cause)

        except Exception as exc:
            log.error("Claim submission unexpected error for %s...: %s", balance_id[:16], exc, exc_info=True)
            return TransientFailure(balance_id=balance_id, cause=str(exc) or type(exc).__name__)

        tx_hash = response.get("hash") or claim.envelope.hash_hex()
        log.info("Claim succeeded for %s... (tx=%s)", balance_id[:16], tx_hash[:16])
        return Success(balance_id=balance_id, amount=claim.balance.amount, tx_hash=tx_hash)
