"""
GAME CLOCK
Convert elapsed real time into fractional game days

RESPONSIBILITIES:
- Elapsed real milliseconds -> game-day delta
- List the whole-day boundaries crossed, ascending
- Never move time backward

RULES:
❌ No ambient timers, no global clock reads
✅ "now" is always passed in (Clock protocol for services)
✅ Pure calculation
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
import math
from typing import List, Optional, Protocol

from banksim.utils.time import elapsed_ms, now_utc_naive, to_utc_naive


class Clock(Protocol):
    """Source of the current real time"""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock, naive UTC"""

    def now(self) -> datetime:
        return now_utc_naive()


class ManualClock:
    """Clock that only moves when told to"""

    def __init__(self, start: datetime):
        self._now = to_utc_naive(start)

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = to_utc_naive(value)

    def advance(self, **delta) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now


@dataclass(frozen=True)
class ClockTick:
    """Result of observing a slot at a given real time"""
    previous_day: float
    new_day: float
    observed_at: datetime
    boundaries: List[int] = field(default_factory=list)

    @property
    def elapsed_days(self) -> float:
        return self.new_day - self.previous_day


class GameClock:
    """Fixed ratio of real milliseconds per game day"""

    def __init__(self, real_ms_per_game_day: int):
        if real_ms_per_game_day <= 0:
            raise ValueError("real_ms_per_game_day must be positive")
        self.real_ms_per_game_day = real_ms_per_game_day

    def elapsed_game_days(self, last_observed_at: Optional[datetime], now: datetime) -> float:
        """
        Game days between two real timestamps

        A missing last observation counts as zero elapsed, and so does a
        "now" earlier than the last observation.
        """
        if last_observed_at is None:
            return 0.0
        millis = elapsed_ms(last_observed_at, now)
        if millis <= 0:
            return 0.0
        return millis / float(self.real_ms_per_game_day)

    def tick(
        self,
        game_day: Optional[float],
        last_observed_at: Optional[datetime],
        now: datetime,
    ) -> ClockTick:
        previous_day = float(game_day or 0.0)
        new_day = previous_day + self.elapsed_game_days(last_observed_at, now)

        now = to_utc_naive(now)
        if last_observed_at is not None and to_utc_naive(last_observed_at) > now:
            observed_at = to_utc_naive(last_observed_at)
        else:
            observed_at = now

        return ClockTick(
            previous_day=previous_day,
            new_day=new_day,
            observed_at=observed_at,
            boundaries=self.boundaries_between(previous_day, new_day),
        )

    @staticmethod
    def boundaries_between(previous_day: float, new_day: float) -> List[int]:
        """Integer days in (floor(previous), floor(new)], ascending"""
        return list(range(math.floor(previous_day) + 1, math.floor(new_day) + 1))
