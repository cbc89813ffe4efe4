from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
import logging
import math
from numbers import Real
from typing import Any, Generic, TypeVar

import numpy as np

from plotgeom.adapters import normalize_columns
from plotgeom.errors import PlotDataError
from plotgeom.range import Range, is_missing
from plotgeom.scalars import NumericScalar, TickScalar
from plotgeom.series import SeriesId


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
X = TypeVar("X")


class SeriesDataStore(Generic[X]):
    """Series samples indexed by one shared, sorted, de-duplicated x axis.

    Every series owns a y column aligned to the shared index; NaN marks an x
    where that series has no sample. When one series has several samples at
    the same x the last one in input order wins.
    """

    def __init__(
        self,
        x_values: Sequence[X] = (),
        columns: Mapping[SeriesId, np.ndarray] | None = None,
        scalar: TickScalar[X] | None = None,
    ) -> None:
        self.scalar: TickScalar[X] = scalar or NumericScalar()  # type: ignore[assignment]
        self._x_values: tuple[X, ...] = tuple(x_values)
        self._positions = self.scalar.positions(self._x_values)
        if self._positions.size > 1 and not np.all(np.diff(self._positions) > 0):
            raise PlotDataError("x index must be strictly increasing")
        self._columns: dict[SeriesId, np.ndarray] = {}
        for series_id, column in (columns or {}).items():
            arr = np.array(column, dtype=np.float64)
            if arr.shape != self._positions.shape:
                raise PlotDataError(f"column {series_id!r} does not match the x index length")
            arr.setflags(write=False)
            self._columns[series_id] = arr
        self._positions.setflags(write=False)

    @classmethod
    def from_items(
        cls,
        items: Iterable[T],
        get_x: Callable[[T], X],
        getters: Mapping[SeriesId, Callable[[T], Any]],
        scalar: TickScalar[X] | None = None,
    ) -> "SeriesDataStore[X]":
        items = list(items)
        x_list = [get_x(item) for item in items]
        columns = {
            series_id: _coerce_column([get_y(item) for item in items], series_id)
            for series_id, get_y in getters.items()
        }
        return cls._index(x_list, columns, scalar)

    @classmethod
    def from_series(
        cls,
        samples: Mapping[SeriesId, Iterable[tuple[X, Any]]],
        scalar: TickScalar[X] | None = None,
    ) -> "SeriesDataStore[X]":
        per_series = {series_id: list(points) for series_id, points in samples.items()}
        total = sum(len(points) for points in per_series.values())
        x_list: list[X] = []
        columns = {series_id: np.full(total, np.nan, dtype=np.float64) for series_id in per_series}
        for series_id, points in per_series.items():
            start = len(x_list)
            x_list.extend(x for x, _ in points)
            columns[series_id][start : len(x_list)] = _coerce_column([y for _, y in points], series_id)
        return cls._index(x_list, columns, scalar)

    @classmethod
    def from_columns(
        cls,
        x: Any,
        ys: Mapping[SeriesId, Any] | None = None,
        *,
        data: Any = None,
    ) -> "SeriesDataStore[Any]":
        normalized = normalize_columns(x, ys, data=data)
        return cls._index(normalized.x, normalized.y, normalized.scalar)

    @classmethod
    def _index(
        cls,
        x_list: Sequence[X],
        columns: Mapping[SeriesId, np.ndarray],
        scalar: TickScalar[X] | None,
    ) -> "SeriesDataStore[X]":
        scalar = scalar or NumericScalar()  # type: ignore[assignment]
        valid = [i for i, x in enumerate(x_list) if not is_missing(x)]
        if len(valid) != len(x_list):
            LOGGER.debug("dropped %d samples without an x value", len(x_list) - len(valid))
        if not valid:
            empty = np.empty(0, dtype=np.float64)
            return cls((), {series_id: empty for series_id in columns}, scalar)

        positions = np.asarray([scalar.position(x_list[i]) for i in valid], dtype=np.float64)
        uniq, first, inverse = np.unique(positions, return_index=True, return_inverse=True)
        inverse = inverse.reshape(-1)
        x_values = [x_list[valid[j]] for j in first]

        valid_idx = np.asarray(valid, dtype=np.intp)
        indexed: dict[SeriesId, np.ndarray] = {}
        for series_id, column in columns.items():
            values = np.asarray(column, dtype=np.float64)[valid_idx]
            out = np.full(uniq.size, np.nan, dtype=np.float64)
            present = ~np.isnan(values)
            # Walk the samples backwards so the first hit per slot is the last one given.
            slots = inverse[present][::-1]
            picked = values[present][::-1]
            _, last = np.unique(slots, return_index=True)
            out[slots[last]] = picked[last]
            indexed[series_id] = out
        return cls(x_values, indexed, scalar)

    def __len__(self) -> int:
        return len(self._x_values)

    @property
    def is_empty(self) -> bool:
        return not self._x_values

    @property
    def x_values(self) -> tuple[X, ...]:
        return self._x_values

    @property
    def x_positions(self) -> np.ndarray:
        return self._positions

    @property
    def series_ids(self) -> list[SeriesId]:
        return list(self._columns)

    def range_x(self) -> Range[X]:
        if self.is_empty:
            return Range()
        return Range(self._x_values[0], self._x_values[-1])

    def range_y(self) -> Range[float]:
        out: Range[float] = Range()
        for series_id in self._columns:
            out = out.merge_range(self.range_y_for(series_id))
        return out

    def range_y_for(self, series_id: SeriesId) -> Range[float]:
        column = self._columns.get(series_id)
        if column is None:
            return Range()
        finite = column[np.isfinite(column)]
        if finite.size == 0:
            return Range()
        return Range(float(np.min(finite)), float(np.max(finite)))

    def nearest_index(self, query_x: Any) -> int | None:
        """Index of the x closest to ``query_x``; ties go to the lower index."""
        if self.is_empty:
            return None
        q = self._query_position(query_x)
        if math.isnan(q):
            return None
        positions = self._positions
        hi = int(np.searchsorted(positions, q, side="left"))
        if hi == 0:
            return 0
        if hi >= positions.size:
            return positions.size - 1
        lo = hi - 1
        if q - positions[lo] <= positions[hi] - q:
            return lo
        return hi

    def nearest_data_x(self, query_x: Any) -> X | None:
        idx = self.nearest_index(query_x)
        if idx is None:
            return None
        return self._x_values[idx]

    def nearest_position(self, query_x: Any) -> float | None:
        idx = self.nearest_index(query_x)
        if idx is None:
            return None
        return float(self._positions[idx])

    def nearest_data_y(self, query_x: Any) -> dict[SeriesId, float | None]:
        idx = self.nearest_index(query_x)
        if idx is None:
            return {}
        return {series_id: self.y_at(series_id, idx) for series_id in self._columns}

    def y_at(self, series_id: SeriesId, index: int) -> float | None:
        column = self._columns.get(series_id)
        if column is None or not 0 <= index < column.size:
            return None
        value = float(column[index])
        if math.isnan(value):
            return None
        return value

    def series_arrays(self, series_id: SeriesId) -> tuple[np.ndarray, np.ndarray]:
        column = self._columns.get(series_id)
        if column is None:
            LOGGER.debug("unknown series id %r", series_id)
            empty = np.empty(0, dtype=np.float64)
            return empty, empty
        return self._positions, column

    def series_positions(self, series_id: SeriesId) -> list[tuple[float, float]]:
        xs, ys = self.series_arrays(series_id)
        return list(zip(xs.tolist(), ys.tolist()))

    def _query_position(self, query_x: Any) -> float:
        if isinstance(query_x, Real):
            return float(query_x)
        return self.scalar.position(query_x)


def _coerce_column(values: Sequence[Any], series_id: SeriesId) -> np.ndarray:
    out = np.empty(len(values), dtype=np.float64)
    for i, raw in enumerate(values):
        if raw is None:
            out[i] = np.nan
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"series {series_id!r} has a non-numeric y at index {i}: {raw!r}") from exc
    return out
