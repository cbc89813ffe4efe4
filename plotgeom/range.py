from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable, Generic, Iterable, TypeVar


T = TypeVar("T")
U = TypeVar("U")


def is_missing(value: Any) -> bool:
    """True for ``None`` and NaN, the markers for an absent sample."""
    if value is None:
        return True
    return isinstance(value, Real) and value != value


@dataclass(frozen=True)
class Range(Generic[T]):
    """Closed interval of observed (or explicitly requested) axis values.

    Both ends are ``None`` for the empty range. Ranges only ever widen:
    merging a value or an explicit bound never moves an end inward.
    """

    min: T | None = None
    max: T | None = None

    def __post_init__(self) -> None:
        if (self.min is None) != (self.max is None):
            raise ValueError("Range needs both ends or neither")
        if self.min is not None and self.max < self.min:  # type: ignore[operator]
            raise ValueError(f"Range min {self.min!r} is greater than max {self.max!r}")

    @classmethod
    def empty(cls) -> "Range[T]":
        return cls()

    @classmethod
    def from_samples(cls, values: Iterable[T]) -> "Range[T]":
        lo: T | None = None
        hi: T | None = None
        for value in values:
            if is_missing(value):
                continue
            if lo is None or value < lo:  # type: ignore[operator]
                lo = value
            if hi is None or value > hi:  # type: ignore[operator]
                hi = value
        return cls(lo, hi)

    @property
    def is_empty(self) -> bool:
        return self.min is None

    @property
    def is_degenerate(self) -> bool:
        return self.min is not None and self.min == self.max

    def merge(self, value: T | None) -> "Range[T]":
        if is_missing(value):
            return self
        if self.is_empty:
            return Range(value, value)
        return Range(min(self.min, value), max(self.max, value))  # type: ignore[type-var]

    def merge_range(self, other: "Range[T]") -> "Range[T]":
        if other.is_empty:
            return self
        return self.merge(other.min).merge(other.max)

    def replace(self, explicit_min: T | None = None, explicit_max: T | None = None) -> "Range[T]":
        # Explicit bounds tighter than the observed data are ignored on that side.
        lo, hi = self.min, self.max
        if not is_missing(explicit_min):
            lo = explicit_min if lo is None else min(lo, explicit_min)  # type: ignore[type-var]
        if not is_missing(explicit_max):
            hi = explicit_max if hi is None else max(hi, explicit_max)  # type: ignore[type-var]
        if lo is None and hi is None:
            return self
        if lo is None:
            lo = hi
        if hi is None:
            hi = lo
        if hi < lo:  # type: ignore[operator]
            lo, hi = hi, lo
        return Range(lo, hi)

    def contains_pos(self, value: T | None) -> bool:
        if self.is_empty or is_missing(value):
            return False
        return self.min <= value <= self.max  # type: ignore[operator]

    def map(self, fn: Callable[[T], U]) -> "Range[U]":
        if self.is_empty:
            return Range()
        return Range(fn(self.min), fn(self.max))  # type: ignore[arg-type]

    def span(self) -> float:
        """Width of a float range; 0.0 for empty or degenerate ranges."""
        if self.is_empty:
            return 0.0
        return float(self.max - self.min)  # type: ignore[operator]
