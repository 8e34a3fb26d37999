from datetime import datetime, timedelta, timezone

from luminor.platform.clock import Clock, FixedClock, RealClock

FIXED = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


def test_fixed_clock_returns_given_time():
    clock = FixedClock(FIXED)
    assert clock.now() == FIXED
    assert isinstance(clock, Clock)


def test_fixed_clock_is_stable_across_calls():
    clock = FixedClock(FIXED)
    assert clock.now() == clock.now()
    assert clock.t == FIXED


def test_real_clock_is_between_observations():
    before = datetime.now(timezone.utc)
    value = RealClock().now()
    after = datetime.now(timezone.utc)
    assert before <= value <= after


def test_real_clock_is_close_to_utc_now():
    clock = RealClock()
    value = clock.now()
    assert abs(value - datetime.now(timezone.utc)) < timedelta(seconds=5)
    assert isinstance(clock, Clock)


def test_fixed_clocks_keep_their_own_times():
    later = FIXED + timedelta(hours=1)
    assert FixedClock(later).now() - FixedClock(FIXED).now() == timedelta(hours=1)