from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math

import numpy as np


# Upper bound on generated ticks for any axis, whatever the pixel extent.
MAX_TICKS = 10_000

# Step sizes outside these bounds switch labels to scientific notation.
_SCIENTIFIC_STEP_MIN = 1e-6
_SCIENTIFIC_STEP_MAX = 1e9


def nice_step(vmin: float, vmax: float, target: int) -> float:
    """Smallest 1/2/5 x 10^k step that keeps at most ``target`` ticks in range."""
    if target <= 0:
        raise ValueError("target must be > 0")
    span = float(vmax) - float(vmin)
    return _nice_number(span / max(target - 1, 1), round_result=False)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> tuple[np.ndarray, float | None]:
    if target <= 0:
        raise ValueError("target must be > 0")
    target = min(int(target), MAX_TICKS)
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64), None

    step = nice_step(vmin, vmax, target)
    # Tolerate quotients like -0.3 / 0.1 == -2.9999999999999996.
    tick_min = np.ceil(vmin / step - 1e-9) * step
    tick_max = np.floor(vmax / step + 1e-9) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    ticks = ticks_within_range(ticks, vmin=vmin, vmax=vmax, limit=target)
    if ticks.size < 2 or not np.isclose(ticks[1] - ticks[0], step, rtol=1e-6, atol=0.0):
        # Range-end fallback ticks do not follow the step.
        return ticks, None
    return ticks, step


def ticks_within_range(ticks: np.ndarray, *, vmin: float, vmax: float, limit: int | None = None) -> np.ndarray:
    if ticks.size == 0:
        return _edge_ticks(vmin, vmax, limit)
    step = float(abs(ticks[1] - ticks[0])) if ticks.size > 1 else max(1e-12, abs(vmax - vmin))
    eps = max(1e-12, step * 1e-6)
    mask = (ticks >= (vmin - eps)) & (ticks <= (vmax + eps))
    out = ticks[mask]
    if out.size == 0:
        return _edge_ticks(vmin, vmax, limit)
    # Drift that survived the tolerance is pulled back onto the range ends.
    return np.unique(np.clip(out, vmin, vmax))


def _edge_ticks(vmin: float, vmax: float, limit: int | None) -> np.ndarray:
    if abs(vmax - vmin) > 1e-12 and (limit is None or limit >= 2):
        return np.asarray([vmin, vmax], dtype=np.float64)
    return np.asarray([vmin], dtype=np.float64)


@dataclass(frozen=True)
class NumericTickState:
    """Shared label formatter for one numeric axis."""

    step: float | None = None

    @property
    def decimals(self) -> int:
        if self.step is None:
            return 6
        return _decimals_from_step(self.step)

    def format(self, value: float) -> str:
        return format_tick(float(value), step=self.step, decimals=self.decimals)


def format_tick(value: float, *, step: float | None = None, decimals: int | None = None) -> str:
    """Label for one tick value.

    With a ``step`` every label on the axis gets the precision that step needs,
    so neighbouring ticks never format to the same text. Steps too small or too
    large for fixed point use scientific notation with as many mantissa digits
    as the step resolves at that magnitude.
    """
    if not np.isfinite(value):
        return str(value)
    has_step = step is not None and np.isfinite(step) and step > 0
    if has_step and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)

    if has_step and not _SCIENTIFIC_STEP_MIN <= step < _SCIENTIFIC_STEP_MAX:
        if abs_v == 0:
            return "0"
        digits = max(0, int(math.floor(math.log10(abs_v))) - int(math.floor(math.log10(step))))
        return f"{value:.{digits}e}"
    if not has_step and abs_v != 0 and (abs_v >= _SCIENTIFIC_STEP_MAX or abs_v < _SCIENTIFIC_STEP_MIN):
        mantissa, exponent = f"{value:.6e}".split("e")
        return f"{mantissa.rstrip('0').rstrip('.')}e{exponent}"

    if decimals is None:
        decimals = _decimals_from_step(step) if has_step else 6
    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if not has_step and "." in out:
        # Without a step there is no shared precision to keep.
        out = out.rstrip("0").rstrip(".")
    if out.startswith("-") and Decimal(out) == 0:
        out = out[1:]
    return out


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    # Round away float noise such as 5.000000000000001e-05.
    return float(f"{nice_frac * (10**exp):.12g}")


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(f"{float(step):.12g}").normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
