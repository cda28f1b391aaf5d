"""Evaluation of Horizon's JSON claim predicates.

Horizon renders predicates as nested dicts::

    {"unconditional": true}
    {"abs_before": "2025-01-01T00:00:00Z", "abs_before_epoch": "1735689600"}
    {"not": {...}}, {"and": [{...}, {...}]}, {"or": [{...}, {...}]}
    {"rel_before": "86400"}

``rel_before`` is relative to the balance's creation time, which Horizon does
not expose on the balance, so it is treated as satisfied and left to the
ledger.

Deadlines past what ``datetime`` can hold (a lock at int64 max renders as
``+292277026596-12-04T15:30:07Z``) are clamped to ``FOREVER``, or to ``NEVER``
when they fall before the representable range.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

FOREVER = datetime.max.replace(tzinfo=timezone.utc)
NEVER = datetime.min.replace(tzinfo=timezone.utc)


def _abs_before(predicate: dict[str, Any]) -> datetime:
    if epoch := predicate.get("abs_before_epoch"):
        seconds = int(epoch)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return FOREVER if seconds > 0 else NEVER
    text = predicate["abs_before"]
    if text.startswith("+"):
        return FOREVER
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def is_claimable(predicate: dict[str, Any] | None, now: datetime) -> bool:
    """Whether ``predicate`` is satisfied at ``now`` (timezone-aware)."""
    if not predicate or predicate.get("unconditional"):
        return True
    if "abs_before" in predicate or "abs_before_epoch" in predicate:
        return now < _abs_before(predicate)
    if "rel_before" in predicate:
        return True
    if "not" in predicate:
        return not is_claimable(predicate["not"], now)
    if "and" in predicate:
        return all(is_claimable(p, now) for p in predicate["and"])
    if "or" in predicate:
        return any(is_claimable(p, now) for p in predicate["or"])
    raise ValueError(f"unrecognised claim predicate: {predicate!r}")


def unlocks_at(predicate: dict[str, Any] | None) -> datetime | None:
    """The unlock time of a ``not abs_before`` lock, the usual Pi lockup shape."""
    if predicate and "not" in predicate:
        inner = predicate["not"]
        if "abs_before" in inner or "abs_before_epoch" in inner:
            return _abs_before(inner)
    return None
