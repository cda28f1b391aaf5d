"""Shared fixtures for pi_claimer tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key
from stellar_sdk import Keypair

from pi_claimer.daemon import ClaimDaemon
from pi_claimer.models.config import ClaimerConfig, NotifyConfig, ScheduleMode
from pi_claimer.stellar.builder import SponsoredClaimBuilder

from tests.mocks import MockLedger, MockNotifier

# BIP-39 reference vectors (valid checksums)
CLAIMANT_PHRASE = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)
SPONSOR_PHRASE = "legal winner thank year wave sausage worth useful legal winner thank yellow"
BAD_PHRASE = " ".join(["abandon"] * 12)  # checksum fails

CLAIMANT = Keypair.from_raw_ed25519_seed(bytes([1] * 32))
SPONSOR = Keypair.from_raw_ed25519_seed(bytes([2] * 32))
DESTINATION = Keypair.from_raw_ed25519_seed(bytes([3] * 32)).public_key

NETWORK_PASSPHRASE = "Pi Network"
BASE_FEE = 100_000
EXPLORER_URL = "https://blockexplorer.minepi.com/mainnet/transactions/{hash}"

CONFIG_ENV_VARS = (
    "CLAIMANT_PHRASE", "SPONSOR_PHRASE", "DESTINATION_ADDRESS",
    "HORIZON_URL", "NETWORK_PASSPHRASE", "FEE_MULTIPLIER", "CYCLE_DELAY",
    "SCHEDULE", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID",
)


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add network info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = NETWORK_PASSPHRASE
    meta["Claimant Account"] = CLAIMANT.public_key
    meta["Sponsor Account"] = SPONSOR.public_key
    meta["Destination"] = DESTINATION


def pytest_html_results_summary(prefix, summary, postfix):
    """Inject the test accounts into the report summary."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>Test accounts</strong><br/>"
        f"Claimant: {CLAIMANT.public_key}<br/>"
        f"Sponsor: {SPONSOR.public_key}<br/>"
        f"Destination: {DESTINATION}"
        "</div>"
    )


def make_test_config(**overrides) -> ClaimerConfig:
    """Build a ClaimerConfig suitable for testing."""
    defaults = dict(
        claimant_phrase=CLAIMANT_PHRASE,
        sponsor_phrase=SPONSOR_PHRASE,
        destination_address=DESTINATION,
        horizon_url="https://horizon.example.test",
        network_passphrase=NETWORK_PASSPHRASE,
        fee_multiplier=2,
        tx_timeout=60,
        schedule=ScheduleMode.IMMEDIATE,
        cycle_delay=0.0,
        notify=NotifyConfig(explorer_url=EXPLORER_URL),
    )
    defaults.update(overrides)
    return ClaimerConfig(**defaults)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_config():
    return make_test_config()


@pytest.fixture
def ledger():
    return MockLedger(base_fee=BASE_FEE)


@pytest.fixture
def notifier():
    return MockNotifier()


@pytest.fixture
def builder(ledger):
    return SponsoredClaimBuilder(ledger, NETWORK_PASSPHRASE, fee_multiplier=2, tx_timeout=60)


@pytest.fixture
def daemon(test_config, ledger, notifier):
    """ClaimDaemon with injected keys, mocked ledger and notifier."""
    return ClaimDaemon(test_config, CLAIMANT, SPONSOR, ledger=ledger, notifier=notifier)
