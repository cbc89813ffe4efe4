from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import datetime as dt
from enum import Enum
import math
from typing import Any, Generic, Iterable, Protocol, Sequence, TypeVar

import numpy as np

from plotgeom.range import Range
from plotgeom.scales import MAX_TICKS, NumericTickState, _nice_number, generate_nice_ticks


T = TypeVar("T")

EPOCH_NAIVE = dt.datetime(1970, 1, 1)


class TickState(Protocol):
    def format(self, value: Any) -> str: ...


class TickScalar(ABC, Generic[T]):
    """How one kind of axis value is positioned, stepped and labelled."""

    @abstractmethod
    def position(self, value: T) -> float:
        """Float position used for projection and search."""

    @abstractmethod
    def from_position(self, position: float) -> T: ...

    @abstractmethod
    def nice_ticks(self, value_range: Range[T], target: int) -> tuple[list[T], TickState]:
        """Ticks inside a non-degenerate ``value_range``, at most about ``target`` of them."""

    @abstractmethod
    def state_for(self, values: Sequence[T]) -> TickState:
        """Formatter sized to tell the given (sorted) values apart."""

    def positions(self, values: Iterable[T]) -> np.ndarray:
        return np.asarray([self.position(v) for v in values], dtype=np.float64)


class NumericScalar(TickScalar[float]):
    def position(self, value: float) -> float:
        return float(value)

    def from_position(self, position: float) -> float:
        return float(position)

    def nice_ticks(self, value_range: Range[float], target: int) -> tuple[list[float], TickState]:
        ticks, step = generate_nice_ticks(float(value_range.min), float(value_range.max), target)
        return [float(v) for v in ticks], NumericTickState(step=step)

    def state_for(self, values: Sequence[float]) -> TickState:
        if len(values) < 2:
            return NumericTickState()
        diffs = np.diff(np.asarray(values, dtype=np.float64))
        positive = diffs[diffs > 0]
        if positive.size == 0:
            return NumericTickState()
        return NumericTickState(step=float(np.min(positive)))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NumericScalar)

    def __hash__(self) -> int:
        return hash(NumericScalar)

    def __repr__(self) -> str:
        return "NumericScalar()"


class Period(Enum):
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def approx_seconds(self) -> float:
        return _APPROX_SECONDS[self]


_APPROX_SECONDS = {
    Period.SECOND: 1.0,
    Period.MINUTE: 60.0,
    Period.HOUR: 3600.0,
    Period.DAY: 86400.0,
    Period.WEEK: 7 * 86400.0,
    Period.MONTH: 365.2425 * 86400.0 / 12.0,
    Period.YEAR: 365.2425 * 86400.0,
}

# Fine to coarse; the first step whose tick count fits wins.
TEMPORAL_STEPS: tuple[tuple[Period, int], ...] = (
    (Period.SECOND, 1),
    (Period.SECOND, 5),
    (Period.SECOND, 15),
    (Period.SECOND, 30),
    (Period.MINUTE, 1),
    (Period.MINUTE, 5),
    (Period.MINUTE, 15),
    (Period.MINUTE, 30),
    (Period.HOUR, 1),
    (Period.HOUR, 3),
    (Period.HOUR, 6),
    (Period.HOUR, 12),
    (Period.DAY, 1),
    (Period.DAY, 2),
    (Period.WEEK, 1),
    (Period.MONTH, 1),
    (Period.MONTH, 3),
    (Period.MONTH, 6),
    (Period.YEAR, 1),
    (Period.YEAR, 2),
    (Period.YEAR, 5),
    (Period.YEAR, 10),
)


@dataclass(frozen=True)
class TemporalTickState:
    period: Period
    step: int = 1
    with_date: bool = True

    @property
    def pattern(self) -> str:
        if self.period is Period.YEAR:
            return "%Y"
        if self.period is Period.MONTH:
            return "%Y-%m"
        if self.period in (Period.WEEK, Period.DAY):
            return "%Y-%m-%d"
        clock = "%H:%M:%S" if self.period is Period.SECOND else "%H:%M"
        return f"%Y-%m-%d {clock}" if self.with_date else clock

    def format(self, value: dt.datetime) -> str:
        return value.strftime(self.pattern)


class TemporalScalar(TickScalar[dt.datetime]):
    """Datetime axis with calendar-aligned ticks.

    Naive datetimes are positioned as UTC wall time so results never depend on
    the host timezone. ``periods`` restricts which calendar units may be used
    for tick steps.
    """

    def __init__(self, tz: dt.tzinfo | None = None, periods: Iterable[Period] | None = None) -> None:
        self.tz = tz
        self.periods = frozenset(periods) if periods is not None else frozenset(Period)
        if not self.periods:
            raise ValueError("periods must not be empty")

    def position(self, value: dt.datetime) -> float:
        if value.tzinfo is None:
            return (value - EPOCH_NAIVE).total_seconds()
        return value.timestamp()

    def from_position(self, position: float) -> dt.datetime:
        if self.tz is None:
            return EPOCH_NAIVE + dt.timedelta(seconds=float(position))
        return dt.datetime.fromtimestamp(float(position), tz=self.tz)

    def nice_ticks(self, value_range: Range[dt.datetime], target: int) -> tuple[list[dt.datetime], TickState]:
        lo, hi = value_range.min, value_range.max
        span = self.position(hi) - self.position(lo)
        period, step = self._choose_step(span, target)
        ticks = _calendar_ticks(lo, hi, period, step)
        if not ticks:
            ticks = [lo, hi] if target >= 2 else [lo]
        return ticks, TemporalTickState(period=period, step=step, with_date=_spans_days(lo, hi))

    def state_for(self, values: Sequence[dt.datetime]) -> TickState:
        if len(values) < 2:
            return TemporalTickState(period=Period.SECOND)
        positions = self.positions(values)
        diffs = np.diff(positions)
        positive = diffs[diffs > 0]
        smallest = float(np.min(positive)) if positive.size else 1.0
        period = Period.SECOND
        for candidate in Period:
            if candidate.approx_seconds * 0.9 <= smallest:
                period = candidate
        return TemporalTickState(period=period, with_date=_spans_days(values[0], values[-1]))

    def _choose_step(self, span: float, target: int) -> tuple[Period, int]:
        for period, step in TEMPORAL_STEPS:
            if period not in self.periods:
                continue
            if span / (period.approx_seconds * step) + 1.0 <= target:
                return period, step
        coarsest = max(self.periods, key=lambda p: p.approx_seconds)
        units = span / coarsest.approx_seconds / max(target - 1, 1)
        return coarsest, max(1, int(math.ceil(_nice_number(max(units, 1.0), round_result=False))))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TemporalScalar) and other.tz == self.tz and other.periods == self.periods

    def __hash__(self) -> int:
        return hash((TemporalScalar, self.tz, self.periods))

    def __repr__(self) -> str:
        return f"TemporalScalar(tz={self.tz!r})"


def _spans_days(lo: dt.datetime, hi: dt.datetime) -> bool:
    return lo.date() != hi.date()


def _floor_to_period(value: dt.datetime, period: Period, step: int) -> dt.datetime:
    value = value.replace(microsecond=0)
    if period is Period.SECOND:
        return value.replace(second=value.second - value.second % step)
    value = value.replace(second=0)
    if period is Period.MINUTE:
        return value.replace(minute=value.minute - value.minute % step)
    value = value.replace(minute=0)
    if period is Period.HOUR:
        return value.replace(hour=value.hour - value.hour % step)
    value = value.replace(hour=0)
    if period is Period.DAY:
        return value - dt.timedelta(days=value.toordinal() % step)
    if period is Period.WEEK:
        return value - dt.timedelta(days=value.weekday())
    if period is Period.MONTH:
        return value.replace(day=1, month=value.month - (value.month - 1) % step)
    return value.replace(day=1, month=1, year=max(1, value.year - value.year % step))


def _advance(value: dt.datetime, period: Period, step: int) -> dt.datetime:
    if period is Period.SECOND:
        return value + dt.timedelta(seconds=step)
    if period is Period.MINUTE:
        return value + dt.timedelta(minutes=step)
    if period is Period.HOUR:
        return value + dt.timedelta(hours=step)
    if period is Period.DAY:
        return value + dt.timedelta(days=step)
    if period is Period.WEEK:
        return value + dt.timedelta(weeks=step)
    if period is Period.MONTH:
        months = value.year * 12 + (value.month - 1) + step
        return value.replace(year=months // 12, month=months % 12 + 1)
    return value.replace(year=value.year + step)


def _calendar_ticks(lo: dt.datetime, hi: dt.datetime, period: Period, step: int) -> list[dt.datetime]:
    ticks: list[dt.datetime] = []
    seen: set[Any] = set()
    current = _floor_to_period(lo, period, step)
    while current <= hi and len(ticks) < MAX_TICKS:
        tick = _resolve_wall_time(current)
        # Wall times skipped by a DST change resolve onto the next tick's instant.
        key = tick.timestamp() if tick.tzinfo is not None else tick
        if lo <= tick <= hi and key not in seen:
            ticks.append(tick)
            seen.add(key)
        try:
            current = _advance(current, period, step)
        except (OverflowError, ValueError):
            break
    return ticks


def _resolve_wall_time(value: dt.datetime) -> dt.datetime:
    """Shift a wall time that does not exist in its zone (DST gap) to the real instant."""
    if value.tzinfo is None:
        return value
    return dt.datetime.fromtimestamp(value.timestamp(), tz=value.tzinfo)
