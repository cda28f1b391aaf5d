"""Configuration loading and validation."""

from __future__ import annotations

import pytest

from pi_claimer.config import load_config, validate_config
from pi_claimer.errors import ConfigError
from pi_claimer.models.config import ScheduleMode

from tests.conftest import CLAIMANT_PHRASE, DESTINATION, SPONSOR_PHRASE, make_test_config


def _set_required(monkeypatch):
    monkeypatch.setenv("CLAIMANT_PHRASE", CLAIMANT_PHRASE)
    monkeypatch.setenv("SPONSOR_PHRASE", SPONSOR_PHRASE)
    monkeypatch.setenv("DESTINATION_ADDRESS", DESTINATION)


def test_defaults():
    cfg = load_config()
    assert cfg.horizon_url == "https://api.mainnet.minepi.com"
    assert cfg.network_passphrase == "Pi Network"
    assert cfg.fee_multiplier == 2
    assert cfg.tx_timeout == 60
    assert cfg.schedule == ScheduleMode.FIXED
    assert cfg.notify.bot_token == ""


def test_env_supplies_everything(monkeypatch):
    _set_required(monkeypatch)
    monkeypatch.setenv("HORIZON_URL", "https://gateway.example.test")
    monkeypatch.setenv("FEE_MULTIPLIER", "80")
    monkeypatch.setenv("CYCLE_DELAY", "0.001")
    monkeypatch.setenv("SCHEDULE", "backoff")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:ABC")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")

    cfg = load_config()
    validate_config(cfg)

    assert cfg.claimant_phrase == CLAIMANT_PHRASE
    assert cfg.destination_address == DESTINATION
    assert cfg.horizon_url == "https://gateway.example.test"
    assert cfg.fee_multiplier == 80
    assert cfg.cycle_delay == 0.001
    assert cfg.schedule == ScheduleMode.BACKOFF
    assert cfg.notify.bot_token == "123:ABC"
    assert cfg.notify.chat_id == "42"


def test_toml_then_env_priority(tmp_path, monkeypatch):
    path = tmp_path / "claimer.toml"
    path.write_text(
        "[accounts]\n"
        f'destination_address = "{DESTINATION}"\n'
        "[ledger]\n"
        "fee_multiplier = 5\n"
        "skip_locked = false\n"
        "[daemon]\n"
        "cycle_delay = 0\n"
        'schedule = "immediate"\n'
        "[notify]\n"
        'chat_id = "7"\n'
        "alert_window = 10\n"
    )
    monkeypatch.setenv("FEE_MULTIPLIER", "3")

    cfg = load_config(path)

    assert cfg.destination_address == DESTINATION
    assert cfg.fee_multiplier == 3
    assert cfg.skip_locked is False
    assert cfg.cycle_delay == 0
    assert cfg.schedule == ScheduleMode.IMMEDIATE
    assert cfg.notify.chat_id == "7"
    assert cfg.notify.alert_window == 10


def test_explicit_zeros_in_toml_kept(tmp_path, monkeypatch):
    _set_required(monkeypatch)
    path = tmp_path / "claimer.toml"
    path.write_text(
        "[ledger]\n"
        "fee_multiplier = 0\n"
        "[daemon]\n"
        "backoff_base = 0\n"
        "rate_limit_backoff = 0\n"
    )

    cfg = load_config(path)

    assert cfg.fee_multiplier == 0
    assert cfg.backoff_base == 0
    assert cfg.rate_limit_backoff == 0
    with pytest.raises(ConfigError, match="FEE_MULTIPLIER"):
        validate_config(cfg)


def test_missing_file_uses_defaults(tmp_path):
    cfg = load_config(tmp_path / "nope.toml")
    assert cfg.fee_multiplier == 2


def test_missing_required_values_all_named():
    with pytest.raises(ConfigError) as info:
        validate_config(load_config())
    for name in ("CLAIMANT_PHRASE", "SPONSOR_PHRASE", "DESTINATION_ADDRESS"):
        assert name in str(info.value)


def test_single_missing_value_named(monkeypatch):
    _set_required(monkeypatch)
    monkeypatch.delenv("SPONSOR_PHRASE")

    with pytest.raises(ConfigError, match="SPONSOR_PHRASE") as info:
        validate_config(load_config())
    assert "CLAIMANT_PHRASE" not in str(info.value)


@pytest.mark.parametrize("overrides, needle", [
    ({"destination_address": "GNOTANADDRESS"}, "DESTINATION_ADDRESS"),
    ({"fee_multiplier": 0}, "FEE_MULTIPLIER"),
    ({"cycle_delay": -1.0}, "CYCLE_DELAY"),
    ({"tx_timeout": 0}, "tx_timeout"),
    ({"page_size": 500}, "page_size"),
    ({"log_level": "chatty"}, "log_level"),
])
def test_invalid_values(overrides, needle):
    with pytest.raises(ConfigError, match=needle):
        validate_config(make_test_config(**overrides))


def test_unknown_schedule(monkeypatch):
    monkeypatch.setenv("SCHEDULE", "sometimes")
    with pytest.raises(ConfigError, match="sometimes"):
        load_config()


def test_bad_number(monkeypatch):
    monkeypatch.setenv("CYCLE_DELAY", "soon")
    with pytest.raises(ConfigError, match="CYCLE_DELAY"):
        load_config()


def test_phrases_hidden_from_repr():
    text = repr(make_test_config())
    assert CLAIMANT_PHRASE not in text
    assert SPONSOR_PHRASE not in text
