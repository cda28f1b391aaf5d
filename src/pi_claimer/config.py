"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from stellar_sdk import StrKey

from pi_claimer.errors import ConfigError
from pi_claimer.models.config import ClaimerConfig, NotifyConfig, ScheduleMode

# Required values, keyed by the environment variable that supplies them
REQUIRED = {
    "CLAIMANT_PHRASE": "claimant_phrase",
    "SPONSOR_PHRASE": "sponsor_phrase",
    "DESTINATION_ADDRESS": "destination_address",
}


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "",
) -> ClaimerConfig:
    """Load claimer configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (CLAIMANT_PHRASE, TELEGRAM_BOT_TOKEN, etc.)
        2. TOML config file
        3. Defaults from ClaimerConfig

    Nothing is validated here; call ``validate_config`` before starting.
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClaimerConfig()

    # ── Accounts section ───────────────────────────────────
    accounts = raw.get("accounts", {})
    if v := accounts.get("claimant_phrase"):
        cfg.claimant_phrase = str(v)
    if v := accounts.get("sponsor_phrase"):
        cfg.sponsor_phrase = str(v)
    if v := accounts.get("destination_address"):
        cfg.destination_address = str(v)

    # ── Ledger section ─────────────────────────────────────
    ledger = raw.get("ledger", {})
    if v := ledger.get("horizon_url"):
        cfg.horizon_url = str(v)
    if v := ledger.get("network_passphrase"):
        cfg.network_passphrase = str(v)
    if (v := ledger.get("fee_multiplier")) is not None:
        cfg.fee_multiplier = int(v)
    if (v := ledger.get("tx_timeout")) is not None:
        cfg.tx_timeout = int(v)
    if (v := ledger.get("page_size")) is not None:
        cfg.page_size = int(v)
    if v := ledger.get("derivation_path"):
        cfg.derivation_path = str(v)
    if "skip_locked" in ledger:
        cfg.skip_locked = bool(ledger["skip_locked"])

    # ── Daemon section ─────────────────────────────────────
    daemon = raw.get("daemon", {})
    if mode_str := daemon.get("schedule"):
        cfg.schedule = _schedule(mode_str)
    if (v := daemon.get("cycle_delay")) is not None:
        cfg.cycle_delay = float(v)
    if (v := daemon.get("backoff_base")) is not None:
        cfg.backoff_base = float(v)
    if (v := daemon.get("backoff_max")) is not None:
        cfg.backoff_max = float(v)
    if (v := daemon.get("rate_limit_backoff")) is not None:
        cfg.rate_limit_backoff = float(v)
    if v := daemon.get("log_level"):
        cfg.log_level = str(v)

    # ── Notify section ─────────────────────────────────────
    notify_raw = raw.get("notify", {})
    defaults = NotifyConfig()
    cfg.notify = NotifyConfig(
        bot_token=str(notify_raw.get("bot_token", defaults.bot_token)),
        chat_id=str(notify_raw.get("chat_id", defaults.chat_id)),
        api_url=notify_raw.get("api_url", defaults.api_url),
        timeout=float(notify_raw.get("timeout", defaults.timeout)),
        explorer_url=notify_raw.get("explorer_url", defaults.explorer_url),
        alert_window=int(notify_raw.get("alert_window", defaults.alert_window)),
    )

    # ── Environment variable overrides (highest priority) ──
    env = os.environ
    if phrase := env.get(f"{env_prefix}CLAIMANT_PHRASE"):
        cfg.claimant_phrase = phrase
    if phrase := env.get(f"{env_prefix}SPONSOR_PHRASE"):
        cfg.sponsor_phrase = phrase
    if dest := env.get(f"{env_prefix}DESTINATION_ADDRESS"):
        cfg.destination_address = dest.strip()
    if url := env.get(f"{env_prefix}HORIZON_URL"):
        cfg.horizon_url = url
    if passphrase := env.get(f"{env_prefix}NETWORK_PASSPHRASE"):
        cfg.network_passphrase = passphrase
    if mult := env.get(f"{env_prefix}FEE_MULTIPLIER"):
        cfg.fee_multiplier = _number(mult, int, "FEE_MULTIPLIER")
    if delay := env.get(f"{env_prefix}CYCLE_DELAY"):
        cfg.cycle_delay = _number(delay, float, "CYCLE_DELAY")
    if mode_env := env.get(f"{env_prefix}SCHEDULE"):
        cfg.schedule = _schedule(mode_env)
    if token := env.get(f"{env_prefix}TELEGRAM_BOT_TOKEN"):
        cfg.notify.bot_token = token
    if chat := env.get(f"{env_prefix}TELEGRAM_CHAT_ID"):
        cfg.notify.chat_id = chat

    return cfg


def validate_config(cfg: ClaimerConfig) -> None:
    """Raise ConfigError if the config cannot start a daemon.

    Every missing required value is named by its environment variable.
    """
    missing = [name for name, attr in REQUIRED.items() if not getattr(cfg, attr).strip()]
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    if not StrKey.is_valid_ed25519_public_key(cfg.destination_address):
        raise ConfigError(
            f"DESTINATION_ADDRESS is not a valid account address: {cfg.destination_address!r}"
        )
    if cfg.fee_multiplier < 1:
        raise ConfigError(f"FEE_MULTIPLIER must be at least 1, got {cfg.fee_multiplier}")
    if cfg.cycle_delay < 0:
        raise ConfigError(f"CYCLE_DELAY must not be negative, got {cfg.cycle_delay}")
    if cfg.tx_timeout < 1:
        raise ConfigError(f"tx_timeout must be at least 1 second, got {cfg.tx_timeout}")
    if not 1 <= cfg.page_size <= 200:
        raise ConfigError(f"page_size must be between 1 and 200, got {cfg.page_size}")
    if not isinstance(logging.getLevelName(cfg.log_level.upper()), int):
        raise ConfigError(f"Unknown log_level {cfg.log_level!r} (expected debug, info, warning or error)")


def _schedule(value: str) -> ScheduleMode:
    try:
        return ScheduleMode(value.lower())
    except ValueError:
        choices = ", ".join(m.value for m in ScheduleMode)
        raise ConfigError(f"Unknown schedule {value!r} (expected one of: {choices})") from None


def _number(value: str, kind: type, name: str):
    try:
        return kind(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
