from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Generic, Literal, TypeVar

from plotgeom.projection import Projection
from plotgeom.range import Range
from plotgeom.scalars import NumericScalar, TickScalar
from plotgeom.ticks import GeneratedTicks, TickLabels, generate_ticks


T = TypeVar("T")

Axis = Literal["x", "y"]

GRID_LINE_COLOUR: tuple[int, int, int, int] = (0xEF, 0xF2, 0xFA, 255)


@dataclass(frozen=True)
class GridLine:
    start: tuple[float, float]
    end: tuple[float, float]
    label: str


def project_ticks(
    ticks: GeneratedTicks[T],
    projection: Projection,
    axis: Axis,
    scalar: TickScalar[T] | None = None,
) -> list[tuple[float, str]]:
    """Pixel coordinate along ``axis`` for every tick, in tick order.

    ``scalar`` defaults to the one that generated ``ticks``.
    """
    scalar = scalar or ticks.scalar or NumericScalar()  # type: ignore[assignment]
    out: list[tuple[float, str]] = []
    for tick in ticks:
        position = scalar.position(tick.value)
        if axis == "x":
            coord = projection.position_to_svg(position, 0.0)[0]
        else:
            coord = projection.position_to_svg(0.0, position)[1]
        out.append((coord, tick.label))
    return out


def grid_lines(
    ticks: GeneratedTicks[T],
    projection: Projection,
    axis: Axis,
    scalar: TickScalar[T] | None = None,
) -> list[GridLine]:
    inner = projection.inner
    lines: list[GridLine] = []
    for coord, label in project_ticks(ticks, projection, axis, scalar):
        if axis == "x":
            lines.append(GridLine(start=(coord, inner.top), end=(coord, inner.bottom), label=label))
        else:
            lines.append(GridLine(start=(inner.left, coord), end=(inner.right, coord), label=label))
    return lines


@dataclass(frozen=True)
class _GridLineConfig(Generic[T]):
    width: float = 1.0
    colour: tuple[int, int, int, int] = GRID_LINE_COLOUR
    ticks: TickLabels[T] = field(default_factory=TickLabels)

    axis: Axis = field(default="x", init=False, repr=False)

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError("grid line width must be >= 0")

    @classmethod
    def from_ticks(cls, ticks: TickLabels[T]) -> Any:
        return cls(ticks=ticks)

    def with_colour(self, colour: tuple[int, int, int] | tuple[int, int, int, int]) -> Any:
        if len(colour) == 3:
            colour = (*colour, 255)
        return replace(self, colour=tuple(colour))

    def with_width(self, width: float) -> Any:
        return replace(self, width=width)

    def generate(
        self,
        value_range: Range[T],
        projection: Projection,
        scalar: TickScalar[T] | None = None,
    ) -> GeneratedTicks[T]:
        inner = projection.inner
        available = inner.width if self.axis == "x" else inner.height
        return generate_ticks(value_range, available, self.ticks, scalar)

    def lines(
        self,
        value_range: Range[T],
        projection: Projection,
        scalar: TickScalar[T] | None = None,
    ) -> list[GridLine]:
        ticks = self.generate(value_range, projection, scalar)
        return grid_lines(ticks, projection, self.axis, scalar)


@dataclass(frozen=True)
class XGridLine(_GridLineConfig[T]):
    """Vertical grid lines at the x ticks, spanning the inner area top to bottom."""

    axis: Axis = field(default="x", init=False, repr=False)


@dataclass(frozen=True)
class YGridLine(_GridLineConfig[T]):
    """Horizontal grid lines at the y ticks, spanning the inner area left to right."""

    axis: Axis = field(default="y", init=False, repr=False)
