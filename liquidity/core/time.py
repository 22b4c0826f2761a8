"""liquidity.core.time

The only time helper surface in the codebase.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return an aware UTC datetime."""

    return datetime.now(tz=UTC)


def age_ms(produced_at: datetime, *, now: datetime | None = None) -> int:
    """Return the age of a timestamp in milliseconds.

    Args:
        produced_at: When the value was produced.
        now: Override clock for testing.
    """

    ref = now or utc_now()
    if produced_at.tzinfo is None:
        produced_at = produced_at.replace(tzinfo=UTC)
    return int((ref - produced_at.astimezone(UTC)).total_seconds() * 1000)
