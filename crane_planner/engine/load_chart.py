from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from openpyxl import load_workbook

from .models import LoadChart, LoadChartPoint

ChartLike = Union[LoadChart, Sequence[LoadChartPoint]]

_PASTE_SPLIT = re.compile(r"[\t;]")


@dataclass(frozen=True)
class EnvelopePoint:
    radius_m: float
    gross_capacity_kg: float
    net_capacity_kg: float


@dataclass(frozen=True)
class LoadCalculationResult:
    radius_m: float
    max_capacity_kg: float
    available_capacity_kg: float
    is_safe: bool


def _points(chart: ChartLike) -> List[LoadChartPoint]:
    pts = chart.points if isinstance(chart, LoadChart) else list(chart)
    return sorted(pts, key=lambda p: p.radius_m)


def _arrays(chart: ChartLike) -> Tuple[np.ndarray, np.ndarray]:
    pts = _points(chart)
    radii = np.array([p.radius_m for p in pts], dtype=float)
    caps = np.array([p.capacity_kg for p in pts], dtype=float)
    return radii, caps


def capacity_at(chart: ChartLike, radius_m: float) -> Optional[float]:
    """
    Gross capacity at a radius.

    Exact chart radius -> that capacity. Between two chart radii -> linear
    interpolation. Outside the chart -> clamped to the nearest endpoint.
    Empty chart -> None (capacity unknown).
    """
    radii, caps = _arrays(chart)
    if radii.size == 0:
        return None
    hit = np.nonzero(radii == float(radius_m))[0]
    if hit.size:
        return float(caps[hit[0]])
    # np.interp clamps to the endpoint values outside [radii[0], radii[-1]]
    return float(np.interp(float(radius_m), radii, caps))


def max_envelope(
    charts: Iterable[ChartLike],
    hook_weight_kg: float,
    lifting_block_kg: float,
    safety_factor: float,
) -> List[EnvelopePoint]:
    """
    Best-case net capacity at every radius found in any of the charts.

      gross_max(r) = max over charts of the capacity listed at r
      net(r)       = max(0, (gross_max(r) - hook - block) / safety_factor)
    """
    gross: Dict[float, float] = {}
    for chart in charts:
        for p in _points(chart):
            r = float(p.radius_m)
            gross[r] = max(gross.get(r, 0.0), float(p.capacity_kg))

    dead = float(hook_weight_kg) + float(lifting_block_kg)
    out: List[EnvelopePoint] = []
    for r in sorted(gross):
        net = max(0.0, (gross[r] - dead) / float(safety_factor))
        out.append(EnvelopePoint(radius_m=r, gross_capacity_kg=gross[r], net_capacity_kg=net))
    return out


def envelope_as_points(envelope: Sequence[EnvelopePoint]) -> List[LoadChartPoint]:
    """Net envelope re-expressed as chart points so capacity_at() can query it."""
    return [LoadChartPoint(radius_m=e.radius_m, capacity_kg=e.net_capacity_kg) for e in envelope]


def calculate_load_capacities(
    chart: ChartLike,
    hook_weight_kg: float,
    lifting_block_kg: float,
    safety_factor: float,
) -> List[LoadCalculationResult]:
    """Available capacity at each chart point (subtract dead weight, then derate)."""
    dead = float(hook_weight_kg) + float(lifting_block_kg)
    rows: List[LoadCalculationResult] = []
    for p in _points(chart):
        available = (float(p.capacity_kg) - dead) / float(safety_factor)
        rows.append(
            LoadCalculationResult(
                radius_m=float(p.radius_m),
                max_capacity_kg=float(p.capacity_kg),
                available_capacity_kg=float(max(0, round(available))),
                is_safe=available > 0,
            )
        )
    return rows


def calculate_available_capacity(
    chart: ChartLike,
    radius_m: float,
    hook_weight_kg: float,
    lifting_block_kg: float,
    safety_factor: float,
) -> Optional[LoadCalculationResult]:
    gross = capacity_at(chart, radius_m)
    if gross is None:
        return None
    available = (gross - float(hook_weight_kg) - float(lifting_block_kg)) / float(safety_factor)
    return LoadCalculationResult(
        radius_m=float(radius_m),
        max_capacity_kg=gross,
        available_capacity_kg=float(max(0, round(available))),
        is_safe=available > 0,
    )


def can_lift_load(
    chart: ChartLike,
    radius_m: float,
    load_kg: float,
    hook_weight_kg: float,
    lifting_block_kg: float,
    safety_factor: float,
) -> bool:
    res = calculate_available_capacity(chart, radius_m, hook_weight_kg, lifting_block_kg, safety_factor)
    return res is not None and res.available_capacity_kg >= float(load_kg)


def find_max_radius_for_load(
    chart: ChartLike,
    load_kg: float,
    hook_weight_kg: float,
    lifting_block_kg: float,
    safety_factor: float,
) -> Optional[float]:
    """Largest chart radius whose gross capacity covers (load + dead weight) x safety factor."""
    required = (float(load_kg) + float(hook_weight_kg) + float(lifting_block_kg)) * float(safety_factor)
    for p in reversed(_points(chart)):
        if p.capacity_kg >= required:
            return float(p.radius_m)
    return None


def calculate_utilization(
    chart: ChartLike,
    radius_m: float,
    load_kg: float,
    hook_weight_kg: float,
    lifting_block_kg: float,
) -> Optional[float]:
    """Rounded percent of gross capacity used by load + dead weight."""
    gross = capacity_at(chart, radius_m)
    if not gross:
        return None
    total = float(load_kg) + float(hook_weight_kg) + float(lifting_block_kg)
    return float(round(total / gross * 100.0))


def format_weight(kg: float, decimals: int = 1) -> str:
    if kg >= 1000:
        return f"{kg / 1000:.{decimals}f}t"
    return f"{kg:.0f}kg"


def _parse_number(text: str) -> Optional[float]:
    try:
        return float(text.strip().replace(",", "."))
    except ValueError:
        return None


def _to_point(radius_raw, capacity_raw) -> Optional[LoadChartPoint]:
    radius = radius_raw if isinstance(radius_raw, (int, float)) else _parse_number(str(radius_raw))
    capacity = capacity_raw if isinstance(capacity_raw, (int, float)) else _parse_number(str(capacity_raw))
    if radius is None or capacity is None or np.isnan(radius) or np.isnan(capacity):
        return None
    # Values below 1000 are tonnes
    if capacity < 1000:
        capacity = capacity * 1000.0
    if radius < 0 or capacity < 0:
        return None
    return LoadChartPoint(radius_m=float(radius), capacity_kg=float(capacity))


def parse_load_chart_paste(text: str) -> List[LoadChartPoint]:
    """
    Parse rows pasted from a spreadsheet: "radius<sep>capacity" per line, sep is
    tab, comma or semicolon. A row holding a tab or semicolon is split on those
    only, so "12,5\\t30" keeps its decimal comma. Rows that do not parse are skipped.
    """
    parsed: List[LoadChartPoint] = []
    for row in text.splitlines():
        if not row.strip():
            continue
        cols = _PASTE_SPLIT.split(row) if _PASTE_SPLIT.search(row) else row.split(",")
        if len(cols) < 2 or not cols[0].strip() or not cols[1].strip():
            continue
        pt = _to_point(cols[0], cols[1])
        if pt is not None:
            parsed.append(pt)
    return sorted(parsed, key=lambda p: p.radius_m)


def load_chart_from_xlsx(path: Union[str, Path]) -> List[LoadChartPoint]:
    """Read radius/capacity from the first two columns of the active sheet."""
    wb = load_workbook(filename=str(path), read_only=True, data_only=True)
    try:
        ws = wb.active
        parsed: List[LoadChartPoint] = []
        for row in ws.iter_rows(min_col=1, max_col=2, values_only=True):
            if row is None or len(row) < 2 or row[0] is None or row[1] is None:
                continue
            pt = _to_point(row[0], row[1])
            if pt is not None:
                parsed.append(pt)
    finally:
        wb.close()
    return sorted(parsed, key=lambda p: p.radius_m)
