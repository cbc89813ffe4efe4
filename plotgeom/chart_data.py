from __future__ import annotations

from typing import Any, Generic, Iterable, TypeVar

import numpy as np

from plotgeom.data import SeriesDataStore
from plotgeom.projection import InnerBounds, Projection
from plotgeom.range import Range
from plotgeom.series import Series, SeriesId, SeriesLine


T = TypeVar("T")
X = TypeVar("X")


class ChartData(Generic[T, X]):
    """Indexed chart samples plus the axis ranges derived from them.

    Rebuild it whenever the items or the series description change; it is
    read-only afterwards.
    """

    def __init__(self, series: Series[T, X], items: Iterable[T]) -> None:
        self.series = series
        self.store: SeriesDataStore[X] = SeriesDataStore.from_items(
            items,
            series.get_x,
            series.getters(),
            scalar=series.scalar_x,
        )
        self.range_x: Range[X] = self.store.range_x().replace(series.min_x, series.max_x)
        self.range_y: Range[float] = self.store.range_y().replace(series.min_y, series.max_y)
        self.lines: list[SeriesLine[T]] = sorted(series.lines, key=lambda line: line.name)
        self.includes_bars = any(line.kind == "bar" for line in self.lines)

    def __len__(self) -> int:
        return len(self.store)

    @property
    def scalar_x(self):
        return self.store.scalar

    def position_range_x(self) -> Range[float]:
        return self.range_x.map(self.store.scalar.position)

    def projection(self, inner: InnerBounds) -> Projection:
        return Projection(range_x=self.position_range_x(), range_y=self.range_y, inner=inner)

    def nearest_data_x(self, query_x: Any) -> X | None:
        return self.store.nearest_data_x(query_x)

    def nearest_position_x(self, query_x: Any, projection: Projection) -> float | None:
        position = self.store.nearest_position(query_x)
        if position is None:
            return None
        return projection.position_to_svg(position, 0.0)[0]

    def nearest_data_y(self, query_x: Any) -> list[tuple[SeriesLine[T], float | None]]:
        y_values = self.store.nearest_data_y(query_x)
        return [(line, y_values.get(line.id)) for line in self.lines]

    def svg_arrays(self, line_id: SeriesId, projection: Projection) -> tuple[np.ndarray, np.ndarray]:
        xs, ys = self.store.series_arrays(line_id)
        range_x = self.position_range_x()
        # Anything outside the current ranges becomes a gap for the renderer.
        xs = np.where(_within(xs, range_x), xs, np.nan)
        ys = np.where(_within(ys, self.range_y), ys, np.nan)
        return projection.project(xs, ys)

    def svg_positions(self, line_id: SeriesId, projection: Projection) -> list[tuple[float, float]]:
        px, py = self.svg_arrays(line_id, projection)
        return list(zip(px.tolist(), py.tolist()))


def _within(values: np.ndarray, value_range: Range[float]) -> np.ndarray:
    if value_range.is_empty:
        return np.zeros(values.shape, dtype=bool)
    return (values >= value_range.min) & (values <= value_range.max)
