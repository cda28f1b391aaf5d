"""Operator notifications."""

from pi_claimer.notify.telegram import TelegramNotifier
from pi_claimer.notify.throttle import AlertThrottle

__all__ = ["AlertThrottle", "TelegramNotifier"]
