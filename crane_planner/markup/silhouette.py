from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

from ..engine.constants import (
    BOOM_BASE_WIDTH_RATIO,
    BOOM_LENGTH_RATIO,
    BOOM_PIVOT_HEIGHT_M,
    BOOM_TIP_WIDTH_RATIO,
    CABIN_LENGTH_RATIO,
    CABIN_WIDTH_RATIO,
    CAPACITY_LABEL_LINE_RATIO,
    CENTER_CROSS_SIZE_M,
    OUTRIGGER_PAD_SIZE_M,
    OUTRIGGER_SPREAD,
    POSITION_LABEL_CLEARANCE_M,
    RING_COUNT_EPS,
    RING_DASH_COUNT,
    RING_DASH_RATIO,
    RING_DASH_SUBDIVISIONS,
    RING_LABEL_HEIGHT_M,
    RING_LABEL_OFFSET_M,
    TURNTABLE_RADIUS_RATIO,
    TURNTABLE_SEGMENTS,
)
from ..engine.geometry import Point2, arc_points, centered_rect, circle_points, place_xy
from ..engine.load_chart import EnvelopePoint, capacity_at, envelope_as_points, format_weight
from ..engine.models import CraneModel, CranePlacement, MarkupCategory, RGBAColor
from .glyphs import render_text, render_text_centered
from .primitives import LineGroup, group_xy_m, to_mm

CABIN_COLOR = RGBAColor(r=0, g=0, b=255, a=255)
BOOM_ALPHA = 200

MarkupSet = Dict[MarkupCategory, List[LineGroup]]


def _shape(placement: CranePlacement, local: Sequence[Point2], color: RGBAColor, closed: bool = True) -> LineGroup:
    world = place_xy(local, placement.position_x, placement.position_y, placement.rotation_deg)
    return group_xy_m(world, placement.position_z, color, closed=closed)


def cabin_center(crane: CraneModel) -> Point2:
    """Cabin centre in chassis coordinates (x across, y along, +y = front), inset from the cab side."""
    hw, hl = crane.base_width_m / 2.0, crane.base_length_m / 2.0
    cab_w = crane.base_width_m * CABIN_WIDTH_RATIO
    cab_l = crane.base_length_m * CABIN_LENGTH_RATIO
    return {
        "front": (0.0, hl - cab_l / 2.0),
        "rear": (0.0, -hl + cab_l / 2.0),
        "left": (-hw + cab_w / 2.0, 0.0),
        "right": (hw - cab_w / 2.0, 0.0),
    }[crane.cab_position]


def build_chassis(crane: CraneModel, placement: CranePlacement) -> List[LineGroup]:
    color = placement.crane_color
    w, l = crane.base_width_m, crane.base_length_m

    groups = [
        _shape(placement, centered_rect(0.0, 0.0, w, l), color),
        _shape(placement, circle_points(0.0, 0.0, w * TURNTABLE_RADIUS_RATIO, TURNTABLE_SEGMENTS), color),
    ]

    boom_len = l * BOOM_LENGTH_RATIO
    bw, tw = w * BOOM_BASE_WIDTH_RATIO, w * BOOM_TIP_WIDTH_RATIO
    boom_color = color.with_alpha(BOOM_ALPHA)
    groups.append(
        _shape(placement, [(-bw / 2, 0.0), (bw / 2, 0.0), (tw / 2, boom_len), (-tw / 2, boom_len)], boom_color)
    )
    groups.append(_shape(placement, [(0.0, 0.0), (0.0, boom_len)], boom_color, closed=False))

    cx, cy = cabin_center(crane)
    groups.append(_shape(placement, centered_rect(cx, cy, w * CABIN_WIDTH_RATIO, l * CABIN_LENGTH_RATIO), CABIN_COLOR))

    h = CENTER_CROSS_SIZE_M / 2.0
    groups.append(_shape(placement, [(-h, 0.0), (h, 0.0)], color, closed=False))
    groups.append(_shape(placement, [(0.0, -h), (0.0, h)], color, closed=False))
    return groups


def build_outriggers(crane: CraneModel, placement: CranePlacement) -> List[LineGroup]:
    """Four outriggers: a beam from the chassis corner plus a square pad, each its own group."""
    color = placement.crane_color
    hw, hl = crane.base_width_m / 2.0, crane.base_length_m / 2.0
    groups: List[LineGroup] = []
    for sx in (-1.0, 1.0):
        for sy in (-1.0, 1.0):
            pad = (sx * OUTRIGGER_SPREAD * hw, sy * hl)
            groups.append(_shape(placement, [(sx * hw, sy * hl), pad], color, closed=False))
            groups.append(_shape(placement, centered_rect(pad[0], pad[1], OUTRIGGER_PAD_SIZE_M, OUTRIGGER_PAD_SIZE_M), color))
    return groups


def effective_max_radius(crane: CraneModel, placement: CranePlacement) -> float:
    limit = placement.max_radius_limit_m
    if limit is not None and limit > 0:
        return min(float(limit), crane.max_radius_m)
    return crane.max_radius_m


def ring_radii(crane: CraneModel, placement: CranePlacement) -> List[float]:
    step = float(placement.radius_step_m)
    r_max = effective_max_radius(crane, placement)
    n = int(math.floor(r_max / step + RING_COUNT_EPS))
    return [round(step * i, 6) for i in range(1, n + 1)]


def dashed_ring(placement: CranePlacement, radius_m: float, color: RGBAColor) -> List[LineGroup]:
    seg = 2.0 * math.pi / RING_DASH_COUNT
    groups: List[LineGroup] = []
    for i in range(RING_DASH_COUNT):
        start = i * seg
        pts = arc_points(
            placement.position_x, placement.position_y, radius_m, start, start + seg * RING_DASH_RATIO, RING_DASH_SUBDIVISIONS
        )
        groups.append(group_xy_m(pts, placement.position_z, color, closed=False))
    return groups


def build_rings(crane: CraneModel, placement: CranePlacement, envelope: Optional[Sequence[EnvelopePoint]] = None) -> List[LineGroup]:
    if not placement.show_radius_rings:
        return []
    net_points = envelope_as_points(envelope or [])
    text_color = placement.radius_color.with_alpha(255)
    text_h = to_mm(RING_LABEL_HEIGHT_M)
    y = to_mm(placement.position_y)
    z = to_mm(placement.position_z)

    groups: List[LineGroup] = []
    for r in ring_radii(crane, placement):
        groups.extend(dashed_ring(placement, r, placement.radius_color))
        x = to_mm(placement.position_x + r + RING_LABEL_OFFSET_M)
        if placement.show_radius_labels:
            groups.extend(render_text(f"{r:g}m", x, y, z, text_h, text_color))
        # Beyond the chart's radii there is no stated capacity, so no label.
        if placement.show_capacity_labels and net_points and net_points[0].radius_m <= r <= net_points[-1].radius_m:
            cap = capacity_at(net_points, r)
            if cap is not None:
                z_cap = z + text_h * CAPACITY_LABEL_LINE_RATIO
                groups.extend(render_text(f"({format_weight(cap, 0)})", x, y, z_cap, text_h, text_color))
    return groups


def build_position_label(crane: CraneModel, placement: CranePlacement) -> List[LineGroup]:
    """Label text over the crane with the crane model name on a second line below it."""
    text = (placement.label_text or "").strip()
    if not text:
        return []
    color = placement.label_color or placement.crane_color
    h = to_mm(placement.label_height_m)
    cx, y = to_mm(placement.position_x), to_mm(placement.position_y)
    z_top = to_mm(placement.position_z + BOOM_PIVOT_HEIGHT_M + POSITION_LABEL_CLEARANCE_M)
    groups = render_text_centered(text, cx, y, z_top, h, color)
    groups.extend(render_text_centered(crane.display_name, cx, y, z_top - h * CAPACITY_LABEL_LINE_RATIO, h * 0.6, color))
    return groups


def build_crane_markups(
    crane: CraneModel,
    placement: CranePlacement,
    envelope: Optional[Sequence[EnvelopePoint]] = None,
) -> MarkupSet:
    return {
        MarkupCategory.CHASSIS: build_chassis(crane, placement),
        MarkupCategory.OUTRIGGERS: build_outriggers(crane, placement),
        MarkupCategory.RINGS: build_rings(crane, placement, envelope),
        MarkupCategory.POSITION_LABEL: build_position_label(crane, placement),
    }
