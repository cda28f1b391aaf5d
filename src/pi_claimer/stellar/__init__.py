"""Horizon integration components."""

from pi_claimer.stellar.builder import SponsoredClaimBuilder
from pi_claimer.stellar.ledger import HorizonLedger
from pi_claimer.stellar.scanner import HorizonBalanceScanner
from pi_claimer.stellar.submitter import HorizonClaimSubmitter

__all__ = [
    "HorizonBalanceScanner",
    "HorizonClaimSubmitter",
    "HorizonLedger",
    "SponsoredClaimBuilder",
]
