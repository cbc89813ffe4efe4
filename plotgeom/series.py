from __future__ import annotations

from dataclasses import dataclass, field, replace
import itertools
from typing import Any, Callable, Generic, Hashable, Literal, TypeVar

from plotgeom.scalars import NumericScalar, TickScalar


T = TypeVar("T")
X = TypeVar("X")

SeriesId = Hashable
SeriesKind = Literal["line", "bar"]

_NEXT_ID = itertools.count()


@dataclass(frozen=True)
class SeriesLine(Generic[T]):
    """One y column read out of the caller's items.

    ``get_y`` may be any per-item transform (a sign flip, a unit conversion);
    returning ``None`` or NaN marks the item as a gap for this line.
    """

    get_y: Callable[[T], float | None] = field(compare=False)
    name: str = ""
    kind: SeriesKind = "line"
    id: SeriesId = None

    def __post_init__(self) -> None:
        if self.kind not in ("line", "bar"):
            raise ValueError(f"unsupported series kind: {self.kind}")
        if self.id is None:
            object.__setattr__(self, "id", next(_NEXT_ID))


def Line(get_y: Callable[[T], float | None], name: str = "", *, id: SeriesId = None) -> SeriesLine[T]:
    return SeriesLine(get_y=get_y, name=name, kind="line", id=id)


def Bar(get_y: Callable[[T], float | None], name: str = "", *, id: SeriesId = None) -> SeriesLine[T]:
    return SeriesLine(get_y=get_y, name=name, kind="bar", id=id)


@dataclass(frozen=True)
class Series(Generic[T, X]):
    """Describes how to turn a list of caller items into chart samples."""

    get_x: Callable[[T], X] = field(compare=False)
    lines: tuple[SeriesLine[T], ...] = ()
    scalar_x: TickScalar[X] = field(default_factory=NumericScalar)
    min_x: X | None = None
    max_x: X | None = None
    min_y: float | None = None
    max_y: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        ids = [line.id for line in self.lines]
        if len(set(ids)) != len(ids):
            raise ValueError("series line ids must be unique")

    def line(self, line: SeriesLine[T] | Callable[[T], Any], name: str = "") -> "Series[T, X]":
        if not isinstance(line, SeriesLine):
            line = Line(line, name)
        return replace(self, lines=self.lines + (line,))

    def bar(self, get_y: Callable[[T], Any], name: str = "") -> "Series[T, X]":
        return self.line(Bar(get_y, name))

    def with_x_range(self, min_x: X | None = None, max_x: X | None = None) -> "Series[T, X]":
        return replace(self, min_x=min_x, max_x=max_x)

    def with_y_range(self, min_y: float | None = None, max_y: float | None = None) -> "Series[T, X]":
        return replace(self, min_y=min_y, max_y=max_y)

    def getters(self) -> dict[SeriesId, Callable[[T], Any]]:
        return {line.id: line.get_y for line in self.lines}
