"""Data models for the pi_claimer daemon."""

from pi_claimer.models.config import ClaimerConfig, NotifyConfig, ScheduleMode
from pi_claimer.models.records import (
    ClaimableBalance,
    CycleReport,
    Outcome,
    Rejected,
    SponsoredClaim,
    Success,
    TransientFailure,
)

__all__ = [
    "ClaimerConfig", "NotifyConfig", "ScheduleMode",
    "ClaimableBalance", "CycleReport", "Outcome", "Rejected",
    "SponsoredClaim", "Success", "TransientFailure",
]
