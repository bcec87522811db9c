from __future__ import annotations

from openpyxl import Workbook

from .load_chart import (
    calculate_available_capacity,
    calculate_load_capacities,
    calculate_utilization,
    can_lift_load,
    capacity_at,
    find_max_radius_for_load,
    format_weight,
    load_chart_from_xlsx,
    max_envelope,
    parse_load_chart_paste,
)
from .models import LoadChart, LoadChartPoint


def _pts(*pairs):
    return [LoadChartPoint(radius_m=r, capacity_kg=c) for r, c in pairs]


def _chart(*pairs, boom: float = 40.0) -> LoadChart:
    return LoadChart(crane_model_id="c1", counterweight_config_id="cw1", boom_length_m=boom, points=_pts(*pairs))


def test_capacity_exact_radius() -> None:
    chart = _chart((10, 50000), (20, 30000), (30, 10000))
    assert capacity_at(chart, 20) == 30000


def test_capacity_linear_interpolation() -> None:
    chart = _chart((10, 50000), (20, 30000), (30, 10000))
    assert capacity_at(chart, 15) == 40000
    assert abs(capacity_at(chart, 27.5) - 15000) < 1e-9


def test_capacity_clamps_outside_chart() -> None:
    chart = _chart((10, 50000), (20, 30000))
    assert capacity_at(chart, 2) == 50000
    assert capacity_at(chart, 99) == 30000


def test_capacity_unsorted_input_and_empty_chart() -> None:
    assert capacity_at(_pts((30, 10000), (10, 50000)), 20) == 30000
    assert capacity_at([], 10) is None


def test_chart_rejects_duplicate_radii() -> None:
    try:
        _chart((10, 50000), (10, 40000))
    except ValueError:
        return
    raise AssertionError("duplicate radii accepted")


def test_envelope_takes_max_across_charts() -> None:
    a = _chart((10, 50000), (20, 30000), boom=30)
    b = _chart((10, 45000), (20, 35000), (30, 12000), boom=40)
    env = max_envelope([a, b], 500, 200, 1.25)
    assert [e.radius_m for e in env] == [10, 20, 30]
    assert env[0].gross_capacity_kg == 50000
    assert env[1].gross_capacity_kg == 35000
    assert abs(env[1].net_capacity_kg - (35000 - 700) / 1.25) < 1e-9


def test_envelope_never_negative() -> None:
    env = max_envelope([_chart((40, 300))], 500, 200, 1.25)
    assert env[0].net_capacity_kg == 0.0


def test_load_capacity_table() -> None:
    rows = calculate_load_capacities(_chart((10, 50000), (40, 600)), 500, 200, 1.25)
    assert rows[0].available_capacity_kg == round((50000 - 700) / 1.25)
    assert rows[0].is_safe is True
    assert rows[1].available_capacity_kg == 0
    assert rows[1].is_safe is False


def test_available_capacity_and_can_lift() -> None:
    chart = _chart((10, 50000), (20, 30000), (30, 10000))
    res = calculate_available_capacity(chart, 15, 500, 200, 1.25)
    assert res is not None
    assert res.max_capacity_kg == 40000
    assert res.available_capacity_kg == round((40000 - 700) / 1.25)
    assert can_lift_load(chart, 15, 30000, 500, 200, 1.25) is True
    assert can_lift_load(chart, 30, 30000, 500, 200, 1.25) is False
    assert calculate_available_capacity([], 15, 500, 200, 1.25) is None


def test_max_radius_for_load() -> None:
    chart = _chart((10, 50000), (20, 30000), (30, 10000))
    # (20000 + 700) * 1.25 = 25875 -> 20 m is the last radius that covers it
    assert find_max_radius_for_load(chart, 20000, 500, 200, 1.25) == 20
    assert find_max_radius_for_load(chart, 60000, 500, 200, 1.25) is None


def test_utilization() -> None:
    chart = _chart((10, 50000), (20, 30000))
    assert calculate_utilization(chart, 20, 14300, 500, 200) == 50
    assert calculate_utilization([], 20, 1000, 500, 200) is None


def test_format_weight() -> None:
    assert format_weight(12500) == "12.5t"
    assert format_weight(12400, 0) == "12t"
    assert format_weight(850) == "850kg"


def test_parse_paste_mixed_separators_and_tonnes() -> None:
    text = "radius\tcapacity\n10\t50\n20;30000\n\nn/a;;\n30,12.5\n"
    pts = parse_load_chart_paste(text)
    assert [(p.radius_m, p.capacity_kg) for p in pts] == [(10, 50000), (20, 30000), (30, 12500)]


def test_parse_paste_decimal_comma() -> None:
    pts = parse_load_chart_paste("12,5\t30\n15;20,5")
    assert [(p.radius_m, p.capacity_kg) for p in pts] == [(12.5, 30000), (15, 20500)]


def test_load_chart_from_xlsx(tmp_path) -> None:
    wb = Workbook()
    ws = wb.active
    ws.append(["Radius (m)", "Capacity"])
    ws.append([20, 30])
    ws.append([10, 50000])
    ws.append([None, 1])
    p = tmp_path / "chart.xlsx"
    wb.save(p)
    pts = load_chart_from_xlsx(p)
    assert [(p.radius_m, p.capacity_kg) for p in pts] == [(10, 50000), (20, 30000)]
