from functools import partial
from typing import Any, Callable, Dict, List, Optional
import logging
import math

from config import PIE_3D_MAX_WEDGES, PIE_3D_MAX_WEDGES_COMPACT, ROW_CAP_2D
from models.common_models import (
    Bar3D,
    Bar3DSeries,
    Chart2DSeries,
    ChartDataset,
    ChartRequest,
    ChartSeries,
    ChartType,
    Line3DSeries,
    Pie3DSeries,
    PieWedge,
    Point3D,
    Scatter3DSeries,
    ScatterDataset,
    ScatterPoint,
    ScatterSeries,
    Table,
)
from services.errors import AxisNotFoundError

logger = logging.getLogger(__name__)

PALETTE_2D = [
    "rgba(255, 99, 132, 0.6)",
    "rgba(54, 162, 235, 0.6)",
    "rgba(255, 206, 86, 0.6)",
    "rgba(75, 192, 192, 0.6)",
    "rgba(153, 102, 255, 0.6)",
    "rgba(255, 159, 64, 0.6)",
    "rgba(199, 199, 199, 0.6)",
    "rgba(83, 102, 255, 0.6)",
    "rgba(40, 159, 64, 0.6)",
    "rgba(210, 99, 132, 0.6)",
]
BORDER_2D = "rgba(255, 99, 132, 1)"

PALETTE_3D = [
    "#ff6b6b", "#4ecdc4", "#45b7d1", "#f9c74f", "#ffafcc", "#83e377",
    "#9d4edd", "#90be6d", "#f3722c", "#577590", "#f8961e", "#43aa8b",
]

# Target extents in scene units
BAR_MAX_HEIGHT = 10.0
SCATTER_MAX_DEPTH = 5.0

Builder = Callable[[Table, ChartRequest, bool], ChartSeries]


def project_chart(table: Table, request: ChartRequest, compact: bool = False) -> ChartSeries:
    """
    Derive the series a renderer needs for one chart.

    Pure: no I/O, no randomness. `compact` selects the small-screen
    presentation (fewer pie wedges, smaller geometry, no value labels).
    Raises AxisNotFoundError when a requested axis is not a column.
    """
    check_axes(table, request)
    builder = _BUILDERS[request.chart_type]
    logger.debug(
        "Projecting %s chart: x=%s y=%s z=%s rows=%d",
        request.chart_type.value, request.x_axis, request.y_axis, request.z_axis, table.row_count,
    )
    return builder(table, request, compact)


def check_axes(table: Table, request: ChartRequest) -> None:
    names = set(table.column_names)
    for axis in (request.x_axis, request.y_axis, request.z_axis):
        if axis is not None and axis not in names:
            raise AxisNotFoundError(axis)


def chart_title(request: ChartRequest) -> str:
    return request.title or f"{request.y_axis} vs {request.x_axis}"


# Value helpers

def to_number(value: Any) -> Optional[float]:
    """Finite numbers and numeric strings become floats, everything else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    scaled = value * factor
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled + 0.5) / factor


def centered_position(index: int, count: int) -> float:
    return float(index * 2 - (count - 1))


def normalize(values: List[Optional[float]], scale: float) -> List[float]:
    """
    Scale values so the column max maps to `scale`.
    A missing or zero max, or a missing value, projects to 0.0.
    """
    present = [v for v in values if v is not None]
    peak = max(present) if present else None
    if not peak:
        return [0.0 for _ in values]
    return [(v / peak) * scale if v is not None else 0.0 for v in values]


def cycle_colors(palette: List[str], count: int) -> List[str]:
    return [palette[i % len(palette)] for i in range(count)]


# 2D builders

def _single_series(
    table: Table,
    request: ChartRequest,
    compact: bool,
    cap: Optional[int],
    per_point_colors: bool,
    fill: bool,
) -> Chart2DSeries:
    rows = table.data[:cap] if cap is not None else table.data
    labels = [row[request.x_axis] for row in rows]
    values = [to_number(row[request.y_axis]) for row in rows]

    if per_point_colors:
        background = cycle_colors(PALETTE_2D, len(values))
        border = None
    else:
        background = PALETTE_2D[0]
        border = BORDER_2D

    return Chart2DSeries(
        chart_type=request.chart_type,
        title=chart_title(request),
        labels=labels,
        datasets=[
            ChartDataset(
                label=request.y_axis,
                data=values,
                background_color=background,
                border_color=border,
                fill=fill,
            )
        ],
    )


def _scatter(table: Table, request: ChartRequest, compact: bool) -> ScatterSeries:
    points = []
    for row in table.data:
        raw_x = row[request.x_axis]
        x = to_number(raw_x)
        points.append(ScatterPoint(x=raw_x if x is None else x, y=to_number(row[request.y_axis])))

    return ScatterSeries(
        title=chart_title(request),
        datasets=[
            ScatterDataset(
                label=f"{request.y_axis} vs {request.x_axis}",
                data=points,
                background_color=cycle_colors(PALETTE_2D, len(points)),
            )
        ],
    )


# 3D builders

def _bar_3d(table: Table, request: ChartRequest, compact: bool) -> Bar3DSeries:
    values = [to_number(v) for v in table.column_values(request.y_axis)]
    heights = normalize(values, BAR_MAX_HEIGHT)
    count = len(values)

    bars = []
    for index, (value, height) in enumerate(zip(values, heights)):
        label = None
        if not compact and value is not None:
            label = round_half_up(value, 2)
        bars.append(
            Bar3D(
                position=(centered_position(index, count), 0.0, 0.0),
                height=height,
                value=value,
                label=label,
                color=PALETTE_3D[index % len(PALETTE_3D)],
            )
        )
    return Bar3DSeries(title=chart_title(request), bars=bars)


def _line_3d(table: Table, request: ChartRequest, compact: bool) -> Line3DSeries:
    values = [to_number(v) for v in table.column_values(request.y_axis)]
    heights = normalize(values, BAR_MAX_HEIGHT)
    count = len(heights)
    points = [(centered_position(i, count), h, 0.0) for i, h in enumerate(heights)]
    return Line3DSeries(title=chart_title(request), points=points, color=PALETTE_3D[0])


def _scatter_3d(table: Table, request: ChartRequest, compact: bool) -> Scatter3DSeries:
    values = [to_number(v) for v in table.column_values(request.y_axis)]
    heights = normalize(values, BAR_MAX_HEIGHT)
    count = len(values)

    if request.z_axis is not None:
        depths = normalize([to_number(v) for v in table.column_values(request.z_axis)], SCATTER_MAX_DEPTH)
    else:
        depths = [0.0] * count

    labels = table.column_values(request.x_axis)
    size = 0.2 if compact else 0.3
    points = [
        Point3D(
            position=(centered_position(i, count), heights[i], depths[i]),
            value=values[i],
            label=labels[i],
            color=PALETTE_3D[i % len(PALETTE_3D)],
            size=size,
        )
        for i in range(count)
    ]
    return Scatter3DSeries(title=chart_title(request), points=points)


def _pie_3d(table: Table, request: ChartRequest, compact: bool) -> Pie3DSeries:
    values = [to_number(v) for v in table.column_values(request.y_axis)]
    # Total covers every row even though only the leading wedges are drawn
    total = sum(v for v in values if v is not None)
    limit = PIE_3D_MAX_WEDGES_COMPACT if compact else PIE_3D_MAX_WEDGES

    wedges = []
    current = 0.0
    for index, value in enumerate(values[:limit]):
        share = (value or 0.0) / total if total else 0.0
        span = share * math.pi * 2
        wedges.append(
            PieWedge(
                start_angle=current,
                end_angle=current + span,
                span=span,
                value=value,
                percent_label=None if compact else f"{int(round_half_up(share * 100))}%",
                color=PALETTE_3D[index % len(PALETTE_3D)],
            )
        )
        current += span

    return Pie3DSeries(
        title=chart_title(request),
        total=total,
        radius=4.0 if compact else 5.0,
        height=1.5 if compact else 2.0,
        wedges=wedges,
    )


_BUILDERS: Dict[ChartType, Builder] = {
    ChartType.BAR: partial(_single_series, cap=ROW_CAP_2D, per_point_colors=False, fill=False),
    ChartType.LINE: partial(_single_series, cap=ROW_CAP_2D, per_point_colors=False, fill=True),
    ChartType.PIE: partial(_single_series, cap=ROW_CAP_2D, per_point_colors=True, fill=False),
    ChartType.DOUGHNUT: partial(_single_series, cap=ROW_CAP_2D, per_point_colors=True, fill=False),
    ChartType.RADAR: partial(_single_series, cap=None, per_point_colors=False, fill=True),
    ChartType.POLAR_AREA: partial(_single_series, cap=None, per_point_colors=True, fill=False),
    ChartType.SCATTER: _scatter,
    ChartType.BAR_3D: _bar_3d,
    ChartType.LINE_3D: _line_3d,
    ChartType.SCATTER_3D: _scatter_3d,
    ChartType.PIE_3D: _pie_3d,
}

_missing = set(ChartType) - set(_BUILDERS)
if _missing:
    raise RuntimeError(f"No chart builder registered for: {sorted(t.value for t in _missing)}")
