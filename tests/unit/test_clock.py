"""Tests for clock abstractions."""

from datetime import datetime, timedelta, timezone

import pytest

from membership_service.utils.clock import FixedClock, SystemClock, ensure_utc, utc_now


class TestUtcHelpers:
    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo == timezone.utc

    def test_ensure_utc_treats_naive_as_utc(self):
        naive = datetime(2026, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_ensure_utc_converts_offsets(self):
        cet = timezone(timedelta(hours=1))
        value = ensure_utc(datetime(2026, 1, 1, 13, 0, tzinfo=cet))
        assert value == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert value.tzinfo == timezone.utc


class TestSystemClock:
    def test_now_is_close_to_wall_clock(self):
        before = utc_now()
        now = SystemClock().now()
        assert before <= now <= utc_now()


class TestFixedClock:
    """Test the manually controlled clock."""

    def test_starts_at_given_instant(self):
        start = datetime(2026, 1, 31, 9, 0, tzinfo=timezone.utc)
        clock = FixedClock(start)
        assert clock.now() == start
        assert clock.now() == start

    def test_advance(self):
        clock = FixedClock(datetime(2026, 1, 1, tzinfo=timezone.utc))
        result = clock.advance(days=1, hours=2, minutes=3)
        assert result == datetime(2026, 1, 2, 2, 3, tzinfo=timezone.utc)
        assert clock.now() == result

    def test_advance_negative_rejected(self):
        clock = FixedClock()
        with pytest.raises(ValueError, match="negative"):
            clock.advance(days=-1)

    def test_set(self):
        clock = FixedClock()
        clock.set(datetime(2030, 6, 1))
        assert clock.now() == datetime(2030, 6, 1, tzinfo=timezone.utc)
