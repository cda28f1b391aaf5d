"""Live tier: read-only checks against a real Pi Horizon server.

Skipped unless PI_CLAIMER_LIVE_HORIZON is set, e.g.::

    PI_CLAIMER_LIVE_HORIZON=https://api.testnet.minepi.com pytest -m horizon
"""

from __future__ import annotations

import os

import pytest

from pi_claimer.stellar.ledger import HorizonLedger

LIVE_HORIZON = os.environ.get("PI_CLAIMER_LIVE_HORIZON", "")


def pytest_collection_modifyitems(config, items):
    if LIVE_HORIZON:
        return
    skip = pytest.mark.skip(reason="PI_CLAIMER_LIVE_HORIZON not set")
    for item in items:
        if "horizon" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
async def live_ledger():
    ledger = HorizonLedger(LIVE_HORIZON)
    yield ledger
    await ledger.close()
