from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from plotgeom.chart_data import ChartData
from plotgeom.grid import GridLine, XGridLine, YGridLine, grid_lines, project_ticks
from plotgeom.projection import InnerBounds, Projection
from plotgeom.range import Range
from plotgeom.scalars import NumericScalar, TickScalar
from plotgeom.series import SeriesId
from plotgeom.ticks import GeneratedTicks, TickLabels, generate_ticks


X = TypeVar("X")


def nominal_tick_labels(
    value_range: Range[X],
    nominal_pixels: float,
    config: TickLabels[X] | None = None,
    scalar: TickScalar[X] | None = None,
) -> list[str]:
    """Tick labels at a nominal axis length, for sizing label gutters.

    Layout needs label text before the final inner area is known; once it is,
    call :meth:`ChartGeometry.compute` to place the ticks for real.
    """
    return generate_ticks(value_range, nominal_pixels, config, scalar).labels


@dataclass(frozen=True)
class ChartGeometry(Generic[X]):
    """Every pixel-space output for one chart, derived from scratch on each call."""

    projection: Projection
    x_ticks: GeneratedTicks[X]
    y_ticks: GeneratedTicks[float]
    x_axis: list[tuple[float, str]] = field(default_factory=list)
    y_axis: list[tuple[float, str]] = field(default_factory=list)
    x_grid: list[GridLine] = field(default_factory=list)
    y_grid: list[GridLine] = field(default_factory=list)
    series: dict[SeriesId, list[tuple[float, float]]] = field(default_factory=dict)

    @classmethod
    def compute(
        cls,
        data: ChartData[Any, X],
        inner: InnerBounds,
        *,
        x_grid: XGridLine[X] | None = None,
        y_grid: YGridLine[float] | None = None,
    ) -> "ChartGeometry[X]":
        x_grid = x_grid or XGridLine()
        y_grid = y_grid or YGridLine()
        projection = data.projection(inner)
        scalar_x = data.scalar_x
        scalar_y = NumericScalar()

        x_ticks = x_grid.generate(data.range_x, projection, scalar_x)
        y_ticks = y_grid.generate(data.range_y, projection, scalar_y)
        return cls(
            projection=projection,
            x_ticks=x_ticks,
            y_ticks=y_ticks,
            x_axis=project_ticks(x_ticks, projection, "x", scalar_x),
            y_axis=project_ticks(y_ticks, projection, "y", scalar_y),
            x_grid=grid_lines(x_ticks, projection, "x", scalar_x),
            y_grid=grid_lines(y_ticks, projection, "y", scalar_y),
            series={line.id: data.svg_positions(line.id, projection) for line in data.lines},
        )
