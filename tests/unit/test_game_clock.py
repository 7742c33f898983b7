"""
Unit Tests for GameClock

✅ Elapsed real time -> fractional game days
✅ Boundary lists (ascending, exclusive of the start day)
✅ Backward / missing timestamps never move time
"""

from datetime import datetime, timedelta, timezone

import pytest

from banksim.domain.services.game_clock import GameClock, ManualClock

START = datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture
def game_clock():
    return GameClock(real_ms_per_game_day=60_000)


def test_elapsed_game_days_is_ratio_of_real_time(game_clock):
    assert game_clock.elapsed_game_days(START, START + timedelta(seconds=90)) == pytest.approx(1.5)


def test_missing_last_observation_counts_as_zero(game_clock):
    assert game_clock.elapsed_game_days(None, START) == 0.0


def test_earlier_now_is_clamped_to_zero(game_clock):
    assert game_clock.elapsed_game_days(START, START - timedelta(minutes=5)) == 0.0


def test_tick_lists_crossed_boundaries_in_order(game_clock):
    tick = game_clock.tick(2.5, START, START + timedelta(minutes=3))

    assert tick.previous_day == 2.5
    assert tick.new_day == pytest.approx(5.5)
    assert tick.boundaries == [3, 4, 5]
    assert tick.observed_at == START + timedelta(minutes=3)


def test_tick_within_a_day_crosses_nothing(game_clock):
    tick = game_clock.tick(2.1, START, START + timedelta(seconds=30))

    assert tick.boundaries == []
    assert tick.new_day == pytest.approx(2.6)


def test_tick_with_earlier_now_keeps_last_observation(game_clock):
    tick = game_clock.tick(4.0, START, START - timedelta(hours=1))

    assert tick.new_day == 4.0
    assert tick.boundaries == []
    assert tick.observed_at == START


def test_tick_accepts_aware_timestamps(game_clock):
    aware_now = (START + timedelta(minutes=2)).replace(tzinfo=timezone.utc)
    tick = game_clock.tick(0.0, START, aware_now)

    assert tick.boundaries == [1, 2]
    assert tick.observed_at.tzinfo is None


def test_boundaries_between_whole_days():
    assert GameClock.boundaries_between(0.0, 1.0) == [1]
    assert GameClock.boundaries_between(1.0, 1.99) == []
    assert GameClock.boundaries_between(11.2, 13.0) == [12, 13]


def test_non_positive_ratio_rejected():
    with pytest.raises(ValueError):
        GameClock(real_ms_per_game_day=0)


def test_manual_clock_moves_only_when_told():
    clock = ManualClock(START)
    assert clock.now() == START

    clock.advance(minutes=2)
    assert clock.now() == START + timedelta(minutes=2)

    clock.set(START)
    assert clock.now() == START
