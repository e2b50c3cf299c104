"""Unit tests for kernel time helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from mp_relay.kernel.time import FrozenClock, SystemClock, to_naive_utc, utc_now


class TestSystemClock:
    def test_now_is_aware_utc(self) -> None:
        now = SystemClock().now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_utc_now_close_to_clock(self) -> None:
        assert abs(utc_now() - SystemClock().now()) < timedelta(seconds=5)


class TestFrozenClock:
    def test_returns_fixed_time(self) -> None:
        fixed = datetime(2026, 1, 1, tzinfo=UTC)
        clock = FrozenClock(fixed)
        assert clock.now() == fixed
        assert clock.now() == fixed

    def test_advance(self) -> None:
        clock = FrozenClock(datetime(2026, 1, 1, tzinfo=UTC))
        clock.advance(seconds=1.5)
        assert clock.now() == datetime(2026, 1, 1, 0, 0, 1, 500000, tzinfo=UTC)


class TestToNaiveUtc:
    def test_aware_value_is_converted(self) -> None:
        value = datetime(2026, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_naive_utc(value) == datetime(2026, 1, 1, 12, 0)

    def test_naive_value_is_unchanged(self) -> None:
        value = datetime(2026, 1, 1, 12, 0)
        assert to_naive_utc(value) is value
