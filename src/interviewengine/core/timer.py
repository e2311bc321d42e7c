"""Interview time limit arithmetic.

Remaining time is derived from the persisted start timestamp on every call.
There is no countdown state: a client-side timer is only a display cache and
is reconciled against :func:`remaining_seconds` on each round-trip.
"""

from __future__ import annotations

import math
from datetime import datetime

import pendulum


def remaining_seconds(
    started_at: datetime | None,
    time_limit_minutes: int | None,
    now: datetime,
) -> int | None:
    """Seconds left before expiry, clamped to ``[0, time_limit_minutes * 60]``.

    Returns ``None`` for untimed quizzes (no limit, or a non-positive one) and
    for interviews that have not started yet.
    """
    if started_at is None or not time_limit_minutes or time_limit_minutes <= 0:
        return None

    total = time_limit_minutes * 60
    elapsed = math.floor((_as_datetime(now) - _as_datetime(started_at)).total_seconds())
    remaining = total - elapsed
    return max(0, min(remaining, total))


def expiry_date(
    started_at: datetime | None,
    time_limit_minutes: int | None,
) -> pendulum.DateTime | None:
    if started_at is None or not time_limit_minutes or time_limit_minutes <= 0:
        return None
    return _as_datetime(started_at).add(minutes=time_limit_minutes)


def is_expired(
    started_at: datetime | None,
    completed_at: datetime | None,
    time_limit_minutes: int | None,
    now: datetime,
) -> bool:
    """True once an unfinished, timed interview has no time left."""
    if completed_at is not None:
        return False
    remaining = remaining_seconds(started_at, time_limit_minutes, now)
    return remaining == 0


def _as_datetime(value: datetime) -> pendulum.DateTime:
    if isinstance(value, pendulum.DateTime):
        return value
    return pendulum.instance(value)
