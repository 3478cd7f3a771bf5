import math

import pytest

from conftest import make_table
from models.common_models import ChartRequest, ChartType
from services.chart_service import (
    PALETTE_2D,
    PALETTE_3D,
    project_chart,
    round_half_up,
    to_number,
)
from services.errors import AxisNotFoundError


@pytest.fixture
def monthly():
    return make_table(
        month=[f"M{i + 1}" for i in range(25)],
        sales=[str((i + 1) * 10) for i in range(25)],
    )


def request(chart_type, x="month", y="sales", **kwargs):
    return ChartRequest(chart_type=chart_type, x_axis=x, y_axis=y, **kwargs)


def test_bar_is_capped_at_twenty_rows(monthly):
    series = project_chart(monthly, request(ChartType.BAR))

    dataset = series.datasets[0]
    assert len(series.labels) == 20
    assert len(dataset.data) == 20
    assert series.labels[0] == "M1"
    assert dataset.data[:3] == [10.0, 20.0, 30.0]
    assert dataset.background_color == PALETTE_2D[0]
    assert dataset.fill is False


def test_line_fills_under_series(monthly):
    series = project_chart(monthly, request(ChartType.LINE))

    assert len(series.labels) == 20
    assert series.datasets[0].fill is True


@pytest.mark.parametrize("chart_type", [ChartType.RADAR, ChartType.POLAR_AREA])
def test_radar_and_polar_area_use_every_row(monthly, chart_type):
    series = project_chart(monthly, request(chart_type))

    assert len(series.labels) == 25
    assert len(series.datasets[0].data) == 25


def test_polar_area_cycles_palette(monthly):
    colors = project_chart(monthly, request(ChartType.POLAR_AREA)).datasets[0].background_color

    assert len(colors) == 25
    assert colors[10] == PALETTE_2D[0]
    assert colors[11] == PALETTE_2D[1]


@pytest.mark.parametrize("chart_type", [ChartType.PIE, ChartType.DOUGHNUT])
def test_pie_and_doughnut_color_each_point(monthly, chart_type):
    series = project_chart(monthly, request(chart_type))

    colors = series.datasets[0].background_color
    assert len(series.labels) == 20
    assert colors == [PALETTE_2D[i % 10] for i in range(20)]
    assert series.datasets[0].border_color is None


def test_scatter_keeps_every_row(monthly):
    table = make_table(x=[str(i) for i in range(30)], y=[i * 2 for i in range(30)])
    series = project_chart(table, request(ChartType.SCATTER, x="x", y="y"))

    points = series.datasets[0].data
    assert len(points) == table.row_count
    assert (points[3].x, points[3].y) == (3.0, 6.0)
    assert series.datasets[0].label == "y vs x"


def test_scatter_keeps_non_numeric_x(monthly):
    points = project_chart(monthly, request(ChartType.SCATTER)).datasets[0].data

    assert points[0].x == "M1"


def test_default_and_custom_title(monthly):
    assert project_chart(monthly, request(ChartType.BAR)).title == "sales vs month"
    assert project_chart(monthly, request(ChartType.BAR, title="Revenue")).title == "Revenue"


def test_3d_bar_normalizes_against_max():
    table = make_table(item=["a", "b", "c"], qty=[10, 20, 5])
    series = project_chart(table, request(ChartType.BAR_3D, x="item", y="qty"))

    assert [b.height for b in series.bars] == [5.0, 10.0, 2.5]
    assert [b.position for b in series.bars] == [(-2.0, 0.0, 0.0), (0.0, 0.0, 0.0), (2.0, 0.0, 0.0)]
    assert [b.value for b in series.bars] == [10.0, 20.0, 5.0]
    assert [b.color for b in series.bars] == PALETTE_3D[:3]


def test_3d_bar_labels_round_to_two_places():
    table = make_table(item=["a", "b"], qty=["3.14159", "2.5"])
    bars = project_chart(table, request(ChartType.BAR_3D, x="item", y="qty")).bars

    assert [b.label for b in bars] == [3.14, 2.5]


def test_3d_bar_compact_drops_labels():
    table = make_table(item=["a", "b"], qty=[1, 2])
    bars = project_chart(table, request(ChartType.BAR_3D, x="item", y="qty"), compact=True).bars

    assert all(b.label is None for b in bars)


def test_3d_zero_max_projects_flat():
    table = make_table(item=["a", "b", "c"], qty=[0, 0, "n/a"])
    bars = project_chart(table, request(ChartType.BAR_3D, x="item", y="qty")).bars

    assert [b.height for b in bars] == [0.0, 0.0, 0.0]
    assert bars[2].value is None


def test_3d_line_is_ordered_polyline():
    table = make_table(item=["a", "b", "c", "d"], qty=[4, 8, 2, 6])
    series = project_chart(table, request(ChartType.LINE_3D, x="item", y="qty"))

    assert series.points == [(-3.0, 5.0, 0.0), (-1.0, 10.0, 0.0), (1.0, 2.5, 0.0), (3.0, 7.5, 0.0)]
    assert series.color == PALETTE_3D[0]


def test_3d_scatter_depth_from_z_axis():
    table = make_table(item=["a", "b", "c"], qty=[10, 20, 5], depth=[1, 2, 4])
    series = project_chart(table, request(ChartType.SCATTER_3D, x="item", y="qty", z_axis="depth"))

    assert [p.position for p in series.points] == [
        (-2.0, 5.0, 1.25),
        (0.0, 10.0, 2.5),
        (2.0, 2.5, 5.0),
    ]
    assert [p.label for p in series.points] == ["a", "b", "c"]


def test_3d_scatter_without_z_axis_is_flat():
    table = make_table(item=["a", "b"], qty=[1, 2])
    points = project_chart(table, request(ChartType.SCATTER_3D, x="item", y="qty")).points

    assert [p.position[2] for p in points] == [0.0, 0.0]
    assert points[0].size == 0.3


def test_3d_pie_wedge_spans():
    table = make_table(item=["a", "b", "c"], qty=[1, 1, 2])
    series = project_chart(table, request(ChartType.PIE_3D, x="item", y="qty"))

    assert series.total == 4
    assert [w.span for w in series.wedges] == pytest.approx([math.pi / 2, math.pi / 2, math.pi])
    assert [w.start_angle for w in series.wedges] == pytest.approx([0.0, math.pi / 2, math.pi])
    assert series.wedges[-1].end_angle == pytest.approx(2 * math.pi)
    assert [w.percent_label for w in series.wedges] == ["25%", "25%", "50%"]


def test_3d_pie_caps_wedges_but_totals_every_row():
    table = make_table(item=[str(i) for i in range(10)], qty=[1] * 10)

    desktop = project_chart(table, request(ChartType.PIE_3D, x="item", y="qty"))
    compact = project_chart(table, request(ChartType.PIE_3D, x="item", y="qty"), compact=True)

    assert len(desktop.wedges) == 8
    assert len(compact.wedges) == 6
    assert desktop.total == compact.total == 10
    assert desktop.wedges[0].span == pytest.approx(math.pi / 5)
    assert compact.wedges[0].percent_label is None
    assert (compact.radius, compact.height) == (4.0, 1.5)


def test_3d_pie_zero_total_has_empty_wedges():
    table = make_table(item=["a", "b"], qty=[0, 0])
    wedges = project_chart(table, request(ChartType.PIE_3D, x="item", y="qty")).wedges

    assert [w.span for w in wedges] == [0.0, 0.0]


def test_missing_x_axis_raises(monthly):
    with pytest.raises(AxisNotFoundError) as info:
        project_chart(monthly, request(ChartType.BAR, x="week"))

    assert info.value.axis == "week"


def test_missing_z_axis_raises(monthly):
    with pytest.raises(AxisNotFoundError):
        project_chart(monthly, request(ChartType.SCATTER_3D, z_axis="depth"))


@pytest.mark.parametrize("chart_type", list(ChartType))
def test_every_chart_type_projects(monthly, chart_type):
    series = project_chart(monthly, request(chart_type))

    assert series.chart_type == chart_type


@pytest.mark.parametrize("chart_type", list(ChartType))
def test_projection_is_pure(monthly, chart_type):
    first = project_chart(monthly, request(chart_type))
    second = project_chart(monthly, request(chart_type))

    assert first.model_dump() == second.model_dump()


def test_to_number():
    assert to_number("10") == 10.0
    assert to_number(" 2.5 ") == 2.5
    assert to_number(3) == 3.0
    assert to_number(True) is None
    assert to_number("abc") is None
    assert to_number(None) is None


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(-2.5) == -2


def test_to_number_rejects_infinities():
    assert to_number("inf") is None
    assert to_number("1e400") is None
    assert to_number(float("-inf")) is None
    assert to_number(10 ** 400) is None


def test_3d_bar_treats_infinite_values_as_missing():
    table = make_table(item=["a", "b"], qty=["inf", "5"])
    bars = project_chart(table, request(ChartType.BAR_3D, x="item", y="qty")).bars

    assert [b.height for b in bars] == [0.0, 10.0]
    assert [b.value for b in bars] == [None, 5.0]
    assert [b.label for b in bars] == [None, 5.0]


def test_3d_pie_ignores_infinite_values():
    table = make_table(item=["a", "b"], qty=["1e400", "2"])
    wedges = project_chart(table, request(ChartType.PIE_3D, x="item", y="qty")).wedges

    assert [w.span for w in wedges] == pytest.approx([0.0, 2 * math.pi])


def test_round_half_up_passes_through_overflowing_values():
    assert round_half_up(1e308, 2) == 1e308
