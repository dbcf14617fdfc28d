from datetime import UTC, datetime, timedelta

from src.adapters.clock import FixedClock, SystemClock


def test_system_clock_is_utc():
    assert SystemClock().now_utc().tzinfo == UTC


def test_fixed_clock_assumes_utc_for_naive():
    clock = FixedClock(datetime(2026, 1, 1, 12, 0))
    assert clock.now_utc().tzinfo == UTC


def test_fixed_clock_advance():
    start = datetime(2026, 1, 1, tzinfo=UTC)
    clock = FixedClock(start)
    clock.advance(hours=2, minutes=30)
    assert clock.now_utc() == start + timedelta(hours=2, minutes=30)
