from __future__ import annotations

from dataclasses import dataclass
import logging
import math

import numpy as np

from plotgeom.errors import PlotDataError
from plotgeom.range import Range


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class InnerBounds:
    """Pixel rectangle available for plotting, in screen coordinates (y down)."""

    top: float
    bottom: float
    left: float
    right: float

    def __post_init__(self) -> None:
        edges = (self.top, self.bottom, self.left, self.right)
        if not all(math.isfinite(float(v)) for v in edges):
            raise PlotDataError("inner bounds must be finite")
        if self.bottom < self.top or self.right < self.left:
            raise PlotDataError("inner bounds must satisfy top <= bottom and left <= right")

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> "InnerBounds":
        return cls(top=float(y), bottom=float(y) + float(height), left=float(x), right=float(x) + float(width))

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def centre(self) -> tuple[float, float]:
        return ((self.left + self.right) * 0.5, (self.top + self.bottom) * 0.5)


@dataclass(frozen=True)
class Projection:
    """Linear map between float data positions and inner-area pixels.

    A zero-width (or empty) range maps every value on that axis to the pixel
    midpoint. NaN in, NaN out.
    """

    range_x: Range[float]
    range_y: Range[float]
    inner: InnerBounds

    def __post_init__(self) -> None:
        if self.range_x.span() == 0.0:
            LOGGER.debug("degenerate x range %s; projecting to the horizontal midpoint", self.range_x)
        if self.range_y.span() == 0.0:
            LOGGER.debug("degenerate y range %s; projecting to the vertical midpoint", self.range_y)

    def position_to_svg(self, x: float, y: float) -> tuple[float, float]:
        inner = self.inner
        span_x = self.range_x.span()
        span_y = self.range_y.span()
        if math.isnan(x):
            svg_x = math.nan
        elif span_x == 0.0:
            svg_x = inner.centre[0]
        else:
            svg_x = inner.left + (x - self.range_x.min) / span_x * inner.width
        if math.isnan(y):
            svg_y = math.nan
        elif span_y == 0.0:
            svg_y = inner.centre[1]
        else:
            svg_y = inner.bottom - (y - self.range_y.min) / span_y * inner.height
        return (svg_x, svg_y)

    def svg_to_position(self, px: float, py: float) -> tuple[float, float]:
        inner = self.inner
        return (
            _unproject(px - inner.left, inner.width, self.range_x),
            _unproject(inner.bottom - py, inner.height, self.range_y),
        )

    def project(self, xs: np.ndarray, ys: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        inner = self.inner
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        span_x = self.range_x.span()
        span_y = self.range_y.span()
        if span_x == 0.0:
            px = np.where(np.isnan(xs), np.nan, inner.centre[0])
        else:
            px = inner.left + (xs - self.range_x.min) / span_x * inner.width
        if span_y == 0.0:
            py = np.where(np.isnan(ys), np.nan, inner.centre[1])
        else:
            py = inner.bottom - (ys - self.range_y.min) / span_y * inner.height
        return px, py


def _unproject(offset: float, extent: float, value_range: Range[float]) -> float:
    if value_range.is_empty:
        return math.nan
    if math.isnan(offset):
        return math.nan
    span = value_range.span()
    if span == 0.0 or extent == 0.0:
        return float(value_range.min)
    return float(value_range.min) + offset / extent * span
