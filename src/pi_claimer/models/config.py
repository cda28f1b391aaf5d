"""Configuration models for the claimer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

PI_MAINNET_HORIZON = "https://api.mainnet.minepi.com"
PI_NETWORK_PASSPHRASE = "Pi Network"
PI_EXPLORER_TX_URL = "https://blockexplorer.minepi.com/mainnet/transactions/{hash}"


class ScheduleMode(str, Enum):
    """How the delay between cycles is chosen."""

    FIXED = "fixed"  # constant cycle_delay
    BACKOFF = "backoff"  # grow the delay while cycles keep failing
    IMMEDIATE = "immediate"  # no delay at all


@dataclass
class NotifyConfig:
    """Telegram notification settings. Empty credentials disable it."""

    bot_token: str = field(default="", repr=False)
    chat_id: str = ""
    api_url: str = "https://api.telegram.org"
    timeout: float = 10.0  # seconds per request
    explorer_url: str = PI_EXPLORER_TX_URL
    alert_window: int = 300  # seconds between repeated rate-limit alerts


@dataclass
class ClaimerConfig:
    """Complete claimer configuration."""

    # Accounts
    claimant_phrase: str = field(default="", repr=False)
    sponsor_phrase: str = field(default="", repr=False)
    destination_address: str = ""

    # Ledger
    horizon_url: str = PI_MAINNET_HORIZON
    network_passphrase: str = PI_NETWORK_PASSPHRASE
    fee_multiplier: int = 2  # outer bid = base fee x this
    tx_timeout: int = 60  # seconds the inner transaction stays valid
    page_size: int = 10
    derivation_path: str = "m/44'/314159'/0'"
    skip_locked: bool = True

    # Daemon
    schedule: ScheduleMode = ScheduleMode.FIXED
    cycle_delay: float = 1.0  # seconds
    backoff_base: float = 5.0  # seconds
    backoff_max: float = 300.0  # seconds
    rate_limit_backoff: float = 30.0  # seconds
    log_level: str = "info"

    # Notifications
    notify: NotifyConfig = field(default_factory=NotifyConfig)
