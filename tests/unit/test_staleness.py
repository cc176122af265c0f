"""Unit tests for StalenessPolicy and timestamp helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.services.staleness import StalenessPolicy, format_timestamp, parse_timestamp
from tests.conftest import FakeClock

_DAY = timedelta(hours=24)
_MS = timedelta(milliseconds=1)


class TestStalenessPolicy:
    @pytest.fixture()
    def policy(self, clock: FakeClock) -> StalenessPolicy:
        return StalenessPolicy(clock=clock)

    def test_absent_timestamp_is_stale(self, policy: StalenessPolicy) -> None:
        assert policy.is_stale(None) is True

    def test_just_inside_threshold_is_fresh(self, policy: StalenessPolicy, clock: FakeClock) -> None:
        assert policy.is_stale(clock.now - _DAY + _MS) is False

    def test_just_outside_threshold_is_stale(self, policy: StalenessPolicy, clock: FakeClock) -> None:
        assert policy.is_stale(clock.now - _DAY - _MS) is True

    def test_exactly_at_threshold_is_fresh(self, policy: StalenessPolicy, clock: FakeClock) -> None:
        assert policy.is_stale(clock.now - _DAY) is False

    def test_string_timestamps_follow_same_boundary(
        self, policy: StalenessPolicy, clock: FakeClock
    ) -> None:
        assert policy.is_stale(format_timestamp(clock.now - _DAY + _MS)) is False
        assert policy.is_stale(format_timestamp(clock.now - _DAY - _MS)) is True

    def test_javascript_iso_string(self, policy: StalenessPolicy) -> None:
        # 2024-05-01T11:00 is one hour before the fake clock.
        assert policy.is_stale("2024-05-01T11:00:00.000Z") is False
        assert policy.is_stale("2024-04-29T11:00:00.000Z") is True

    def test_unparseable_timestamp_is_stale(self, policy: StalenessPolicy) -> None:
        assert policy.is_stale("yesterday-ish") is True

    def test_naive_datetime_treated_as_utc(self, policy: StalenessPolicy, clock: FakeClock) -> None:
        naive = (clock.now - timedelta(hours=1)).replace(tzinfo=None)
        assert policy.is_stale(naive) is False

    def test_custom_threshold(self, clock: FakeClock) -> None:
        policy = StalenessPolicy(threshold=timedelta(minutes=30), clock=clock)
        assert policy.is_stale(clock.now - timedelta(minutes=29)) is False
        assert policy.is_stale(clock.now - timedelta(minutes=31)) is True

    def test_is_pure(self, policy: StalenessPolicy, clock: FakeClock) -> None:
        stamp = clock.now - timedelta(hours=3)
        assert policy.is_stale(stamp) == policy.is_stale(stamp)


class TestTimestampHelpers:
    def test_format_is_utc_with_z_suffix(self) -> None:
        moment = datetime(2024, 5, 1, 14, 30, 5, 123456, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == "2024-05-01T12:30:05.123456Z"

    def test_format_then_parse_preserves_instant(self) -> None:
        moment = datetime(2024, 5, 1, 12, 0, 0, 1000, tzinfo=timezone.utc)
        assert parse_timestamp(format_timestamp(moment)) == moment

    def test_parse_offset_and_naive(self) -> None:
        assert parse_timestamp("2024-05-01T14:00:00+02:00") == datetime(
            2024, 5, 1, 12, 0, tzinfo=timezone.utc
        )
        assert parse_timestamp("2024-05-01T12:00:00") == datetime(
            2024, 5, 1, 12, 0, tzinfo=timezone.utc
        )

    def test_parse_garbage_returns_none(self) -> None:
        assert parse_timestamp("") is None
        assert parse_timestamp("not a date") is None
