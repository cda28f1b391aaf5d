"""Notifier protocol - best-effort operator alerts."""

from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    """Delivers human-readable status text to an operator channel."""

    @property
    def enabled(self) -> bool:
        ...

    async def notify(self, message: str) -> bool:
        """Send ``message``. Never raises; returns whether it was delivered."""
        ...

    async def close(self) -> None:
        ...
