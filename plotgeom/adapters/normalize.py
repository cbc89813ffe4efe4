from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import datetime as dt
from decimal import Decimal
from typing import Any

import numpy as np

from plotgeom.errors import PlotDataError
from plotgeom.scalars import NumericScalar, TemporalScalar, TickScalar


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


@dataclass(frozen=True)
class NormalizedColumns:
    x: list[Any]
    scalar: TickScalar[Any]
    y: dict[Any, np.ndarray]


def normalize_columns(
    x: Any,
    ys: Mapping[Any, Any] | None = None,
    *,
    data: Any = None,
) -> NormalizedColumns:
    """Coerce an x column and named y columns into plain values and float arrays.

    Columns may be lists, numpy arrays, pandas Series or 1-D torch tensors; with
    ``data=`` (a pandas DataFrame) any column may be given by name, and ``ys``
    defaults to every other numeric column.
    """
    x_values = _resolve_input(x, data=data)
    if x_values is None:
        raise PlotDataError("x input is required")
    x_list, scalar = _coerce_x(x_values)

    if ys is None:
        if data is None:
            raise PlotDataError("y columns are required")
        x_name = x if isinstance(x, str) else None
        ys = {c: c for c in data.columns if c != x_name and _is_numeric_dtype(data[c])}

    out: dict[Any, np.ndarray] = {}
    for series_id, column in ys.items():
        values = _resolve_input(column, data=data)
        arr = _coerce_1d_numeric(values, label=f"y[{series_id!r}]")
        if arr.size != len(x_list):
            raise PlotDataError(f"x and y length mismatch for {series_id!r}: {len(x_list)} != {arr.size}")
        out[series_id] = arr
    return NormalizedColumns(x=x_list, scalar=scalar, y=out)


def _resolve_input(value: Any, data: Any) -> Any:
    if data is None:
        return value
    if pd is None:
        raise PlotDataError("pandas is required when using `data=`")
    if not isinstance(data, pd.DataFrame):
        raise PlotDataError("`data` must be a pandas DataFrame")
    if isinstance(value, str):
        if value not in data.columns:
            raise PlotDataError(f"column not found: {value}")
        return data[value]
    return value


def _is_numeric_dtype(series: Any) -> bool:
    if pd is None:
        return False
    try:
        return bool(pd.api.types.is_numeric_dtype(series))
    except Exception:
        return False


def _coerce_x(value: Any) -> tuple[list[Any], TickScalar[Any]]:
    if isinstance(value, np.ndarray) and value.dtype.kind == "M":
        if value.ndim != 1:
            raise PlotDataError("x must be 1-D")
        # Microsecond precision makes tolist() yield datetimes (NaT becomes None).
        return _temporal(value.astype("datetime64[us]").tolist())

    if pd is not None and isinstance(value, pd.Series) and pd.api.types.is_datetime64_any_dtype(value):
        return _temporal([None if pd.isna(v) else v.to_pydatetime() for v in value])

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        if any(isinstance(v, dt.datetime) for v in value):
            return _temporal(list(value))

    arr = _coerce_1d_numeric(value, label="x")
    return arr.tolist(), NumericScalar()


def _temporal(values: list[Any]) -> tuple[list[Any], TickScalar[Any]]:
    present = [v for v in values if v is not None]
    for v in present:
        if not isinstance(v, dt.datetime):
            raise PlotDataError(f"x mixes datetimes with {type(v)!r}")
    if len({v.tzinfo is None for v in present}) > 1:
        raise PlotDataError("x mixes naive and timezone-aware datetimes")
    tz = present[0].tzinfo if present else None
    return values, TemporalScalar(tz=tz)


def _coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    if pd is not None and isinstance(value, pd.Series):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _coerce_ndarray(np.asarray(value, dtype=object), label=label)

    raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)
    if arr.ndim != 1:
        raise PlotDataError(f"{label} must be 1-D")

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
