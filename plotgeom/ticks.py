from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any, Callable, Generic, Sequence, TypeVar

from plotgeom.errors import PlotDataError
from plotgeom.range import Range
from plotgeom.scalars import NumericScalar, TickScalar, TickState


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MIN_LABEL_SPACING = 50.0


@dataclass(frozen=True)
class TickLabels(Generic[T]):
    """Tick generation settings for one axis.

    ``fixed_ticks`` replaces generated values (only the ones inside the range
    are kept). ``formatter`` overrides label text but not tick placement.
    """

    min_label_spacing: float = DEFAULT_MIN_LABEL_SPACING
    fixed_ticks: tuple[T, ...] | None = None
    formatter: Callable[[T], str] | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.min_label_spacing) or self.min_label_spacing <= 0:
            raise PlotDataError("min_label_spacing must be a finite value > 0")
        if self.fixed_ticks is not None:
            object.__setattr__(self, "fixed_ticks", tuple(self.fixed_ticks))

    @classmethod
    def from_ticks(cls, ticks: Sequence[T]) -> "TickLabels[T]":
        return cls(fixed_ticks=tuple(ticks))

    def with_formatter(self, formatter: Callable[[T], str]) -> "TickLabels[T]":
        return TickLabels(
            min_label_spacing=self.min_label_spacing,
            fixed_ticks=self.fixed_ticks,
            formatter=formatter,
        )

    def target_count(self, available_pixels: float) -> int:
        return max(1, int(math.floor(available_pixels / self.min_label_spacing)))


@dataclass(frozen=True)
class GeneratedTick(Generic[T]):
    value: T
    label: str


@dataclass(frozen=True)
class _FormatterState:
    formatter: Callable[[Any], str]

    def format(self, value: Any) -> str:
        return self.formatter(value)


@dataclass(frozen=True)
class GeneratedTicks(Generic[T]):
    ticks: tuple[GeneratedTick[T], ...] = ()
    state: TickState | None = field(default=None, compare=False)
    scalar: TickScalar[T] | None = field(default=None, compare=False, repr=False)

    @classmethod
    def none(cls) -> "GeneratedTicks[T]":
        return cls()

    @classmethod
    def from_values(
        cls,
        values: Sequence[T],
        state: TickState,
        scalar: TickScalar[T] | None = None,
    ) -> "GeneratedTicks[T]":
        return cls(ticks=tuple(GeneratedTick(v, state.format(v)) for v in values), state=state, scalar=scalar)

    @property
    def values(self) -> list[T]:
        return [t.value for t in self.ticks]

    @property
    def labels(self) -> list[str]:
        return [t.label for t in self.ticks]

    def format(self, value: T) -> str:
        if self.state is None:
            return str(value)
        return self.state.format(value)

    def __len__(self) -> int:
        return len(self.ticks)

    def __iter__(self):
        return iter(self.ticks)


def generate_ticks(
    value_range: Range[T],
    available_pixels: float,
    config: TickLabels[T] | None = None,
    scalar: TickScalar[T] | None = None,
) -> GeneratedTicks[T]:
    config = config or TickLabels()
    scalar = scalar or NumericScalar()  # type: ignore[assignment]
    if value_range.is_empty:
        return GeneratedTicks(scalar=scalar)

    if config.fixed_ticks is not None:
        values = sorted({v for v in config.fixed_ticks if value_range.contains_pos(v)}, key=scalar.position)
        state = scalar.state_for(values)
    elif value_range.is_degenerate:
        values = [value_range.min]
        state = scalar.state_for(values)
    elif not available_pixels > 0:
        LOGGER.debug("no pixels available for ticks (%s); using a single tick", available_pixels)
        values = [value_range.min]
        state = scalar.state_for(values)
    else:
        values, state = scalar.nice_ticks(value_range, config.target_count(available_pixels))

    if config.formatter is not None:
        state = _FormatterState(config.formatter)
    return GeneratedTicks.from_values(values, state, scalar)
