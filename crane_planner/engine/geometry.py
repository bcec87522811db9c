from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .constants import BOOM_PIVOT_HEIGHT_M

Point2 = Tuple[float, float]  # (x_m, y_m)


@dataclass(frozen=True)
class LiftGeometry:
    horizontal_dist_m: float
    boom_length_m: float
    boom_angle_deg: float
    boom_tip_height_m: float      # above crane base
    boom_tip_elevation_m: float   # absolute z
    chain_length_m: float
    reachable: bool


def horizontal_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(float(x2) - float(x1), float(y2) - float(y1))


def solve_lift_geometry(
    crane_x: float,
    crane_y: float,
    crane_z: float,
    boom_length_m: float,
    target_x: float,
    target_y: float,
    target_top_z: float,
    pivot_height_m: float = BOOM_PIVOT_HEIGHT_M,
) -> LiftGeometry:
    """
    Boom angle, tip height and sling/chain length for a single rigid boom.

      d     = horizontal distance crane -> target
      theta = acos(d / L)                    (d <= L)
      z_tip = z_pivot + L * sin(theta)
      chain = z_tip - z_target_top            reachable iff chain > 0

    d > L is unreachable: the boom held horizontal is reported with
    angle = 0 and chain = 0, flagged not reachable.
    """
    L = float(boom_length_m)
    if L <= 0.0:
        raise ValueError("boom_length_m must be > 0.")

    d = horizontal_distance(crane_x, crane_y, target_x, target_y)
    pivot_z = float(crane_z) + float(pivot_height_m)

    if d <= L:
        # clamp against float noise at d == L
        angle_rad = math.acos(min(1.0, max(-1.0, d / L)))
        tip_z = pivot_z + L * math.sin(angle_rad)
        chain = tip_z - float(target_top_z)
        return LiftGeometry(
            horizontal_dist_m=d,
            boom_length_m=L,
            boom_angle_deg=math.degrees(angle_rad),
            boom_tip_height_m=tip_z - float(crane_z),
            boom_tip_elevation_m=tip_z,
            chain_length_m=chain,
            reachable=chain > 0.0,
        )

    return LiftGeometry(
        horizontal_dist_m=d,
        boom_length_m=L,
        boom_angle_deg=0.0,
        boom_tip_height_m=float(pivot_height_m),
        boom_tip_elevation_m=pivot_z,
        chain_length_m=0.0,
        reachable=False,
    )


def rotate_xy(x: float, y: float, rotation_deg: float) -> Point2:
    """Rotate a local point about the origin (counter-clockwise, degrees)."""
    a = math.radians(rotation_deg)
    c, s = math.cos(a), math.sin(a)
    return (x * c - y * s, x * s + y * c)


def place_xy(local: Sequence[Point2], origin_x: float, origin_y: float, rotation_deg: float) -> List[Point2]:
    """Local chassis coordinates -> world coordinates (rotate, then translate)."""
    out: List[Point2] = []
    for x, y in local:
        rx, ry = rotate_xy(x, y, rotation_deg)
        out.append((origin_x + rx, origin_y + ry))
    return out


def rect_polygon(xmin: float, ymin: float, xmax: float, ymax: float) -> List[Point2]:
    return [(xmin, ymin), (xmax, ymin), (xmax, ymax), (xmin, ymax)]


def centered_rect(cx: float, cy: float, width: float, length: float) -> List[Point2]:
    hw, hl = width / 2.0, length / 2.0
    return rect_polygon(cx - hw, cy - hl, cx + hw, cy + hl)


def circle_points(cx: float, cy: float, radius: float, segments: int) -> List[Point2]:
    return [
        (cx + radius * math.cos(2.0 * math.pi * i / segments), cy + radius * math.sin(2.0 * math.pi * i / segments))
        for i in range(segments)
    ]


def arc_points(cx: float, cy: float, radius: float, start_rad: float, end_rad: float, subdivisions: int) -> List[Point2]:
    n = max(1, int(subdivisions))
    return [
        (
            cx + radius * math.cos(start_rad + (end_rad - start_rad) * i / n),
            cy + radius * math.sin(start_rad + (end_rad - start_rad) * i / n),
        )
        for i in range(n + 1)
    ]
