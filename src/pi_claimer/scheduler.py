"""Cycle scheduler - picks the pause between claim cycles."""

from __future__ import annotations

import logging

from pi_claimer.models.config import ClaimerConfig, ScheduleMode
from pi_claimer.models.records import CycleReport

log = logging.getLogger(__name__)


class CycleScheduler:
    """Chooses the delay before the next cycle from the last cycle's report.

    - fixed: ``cycle_delay`` every time; a rate-limited cycle waits at least
      ``rate_limit_backoff``.
    - backoff: ``cycle_delay`` after a clean cycle; after ``n`` consecutive
      troubled cycles, ``max(cycle_delay, backoff_base) * 2**(n-1)`` capped
      at ``backoff_max``.
    - immediate: never waits.
    """

    def __init__(
        self,
        mode: ScheduleMode = ScheduleMode.FIXED,
        cycle_delay: float = 1.0,
        backoff_base: float = 5.0,
        backoff_max: float = 300.0,
        rate_limit_backoff: float = 30.0,
    ) -> None:
        self._mode = mode
        self._cycle_delay = cycle_delay
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._rate_limit_backoff = rate_limit_backoff
        self._troubled_streak = 0

    @classmethod
    def from_config(cls, cfg: ClaimerConfig) -> CycleScheduler:
        return cls(
            mode=cfg.schedule,
            cycle_delay=cfg.cycle_delay,
            backoff_base=cfg.backoff_base,
            backoff_max=cfg.backoff_max,
            rate_limit_backoff=cfg.rate_limit_backoff,
        )

    @property
    def mode(self) -> ScheduleMode:
        return self._mode

    def next_delay(self, report: CycleReport) -> float:
        self._troubled_streak = self._troubled_streak + 1 if report.troubled else 0

        if self._mode == ScheduleMode.IMMEDIATE:
            return 0.0

        if self._mode == ScheduleMode.BACKOFF and self._troubled_streak:
            start = max(self._cycle_delay, self._backoff_base)
            delay = min(start * 2 ** min(self._troubled_streak - 1, 32), self._backoff_max)
            log.debug("Backing off %.1fs after %d troubled cycle(s)", delay, self._troubled_streak)
            return delay

        if report.rate_limited:
            return max(self._cycle_delay, self._rate_limit_backoff)
        return self._cycle_delay
