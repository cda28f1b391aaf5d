"""Protocol interfaces for all pi_claimer components."""

from pi_claimer.interfaces.components import (
    BalanceScanner,
    ClaimBuilder,
    ClaimSubmitter,
    Scheduler,
)
from pi_claimer.interfaces.ledger import LedgerService
from pi_claimer.interfaces.notifier import Notifier

__all__ = [
    "BalanceScanner",
    "ClaimBuilder",
    "ClaimSubmitter",
    "LedgerService",
    "Notifier",
    "Scheduler",
]
