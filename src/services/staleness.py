"""Staleness policy for the cached image directory."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

DEFAULT_THRESHOLD = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class StalenessPolicy:
    """Decides whether a cache snapshot must be refreshed before use.

    A snapshot is stale when it has no recorded refresh time, or when
    ``now - last_updated`` is strictly greater than the threshold.  The
    clock is injectable so the boundary can be tested exactly.
    """

    def __init__(
        self,
        threshold: timedelta = DEFAULT_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._threshold = threshold
        self._clock = clock

    @property
    def threshold(self) -> timedelta:
        return self._threshold

    def now(self) -> datetime:
        return self._clock()

    def is_stale(self, last_updated: str | datetime | None) -> bool:
        if last_updated is None:
            return True

        if isinstance(last_updated, str):
            parsed = parse_timestamp(last_updated)
            if parsed is None:
                return True
            last_updated = parsed
        elif last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)

        return self._clock() - last_updated > self._threshold


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given.

    Accepts the trailing ``Z`` form written by JavaScript's
    ``Date.toISOString()``.  Returns ``None`` for anything unparseable.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(moment: datetime) -> str:
    """Format *moment* as ``2024-05-01T12:00:00.123456Z`` (UTC)."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
