from plotgeom.chart_data import ChartData
from plotgeom.data import SeriesDataStore
from plotgeom.errors import PlotDataError
from plotgeom.geometry import ChartGeometry, nominal_tick_labels
from plotgeom.grid import GRID_LINE_COLOUR, GridLine, XGridLine, YGridLine, grid_lines, project_ticks
from plotgeom.projection import InnerBounds, Projection
from plotgeom.range import Range
from plotgeom.scalars import NumericScalar, Period, TemporalScalar, TickScalar
from plotgeom.series import Bar, Line, Series, SeriesLine
from plotgeom.ticks import GeneratedTick, GeneratedTicks, TickLabels, generate_ticks

__all__ = [
    "Bar",
    "ChartData",
    "ChartGeometry",
    "GRID_LINE_COLOUR",
    "GeneratedTick",
    "GeneratedTicks",
    "GridLine",
    "InnerBounds",
    "Line",
    "NumericScalar",
    "Period",
    "PlotDataError",
    "Projection",
    "Range",
    "Series",
    "SeriesDataStore",
    "SeriesLine",
    "TemporalScalar",
    "TickLabels",
    "TickScalar",
    "XGridLine",
    "YGridLine",
    "generate_ticks",
    "grid_lines",
    "nominal_tick_labels",
    "project_ticks",
]
