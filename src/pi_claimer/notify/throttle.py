"""Alert throttle - at most one alert per window."""

from __future__ import annotations

import time
from typing import Callable


class AlertThrottle:
    """Lets one alert through per ``window`` seconds.

    Used for rate-limit alerts, which tend to repeat every cycle until the
    gateway cools down.
    """

    def __init__(self, window: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._window = window
        self._clock = clock
        self._last: float | None = None
        self.suppressed = 0

    def allow(self) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self._window:
            self.suppressed += 1
            return False
        self._last = now
        self.suppressed = 0
        return True
