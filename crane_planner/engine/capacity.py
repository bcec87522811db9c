from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .geometry import LiftGeometry, solve_lift_geometry
from .load_chart import ChartLike, capacity_at
from .models import CranePlacement


class LiftStatus(str, Enum):
    UNREACHABLE = "unreachable"
    CAPACITY_UNKNOWN = "capacity_unknown"
    REACHABLE = "reachable"  # weight unknown, no verdict
    SAFE = "safe"
    UNSAFE = "unsafe"


@dataclass(frozen=True)
class CapacityEvaluation:
    gross_capacity_kg: Optional[float]
    dead_weight_kg: float
    safety_factor: float
    usable_capacity_kg: Optional[float]
    object_weight_kg: Optional[float]
    utilization_pct: Optional[float]
    is_safe: Optional[bool]


@dataclass(frozen=True)
class LiftEvaluation:
    geometry: LiftGeometry
    capacity: CapacityEvaluation
    status: LiftStatus


def evaluate_capacity(
    gross_capacity_kg: Optional[float],
    dead_weight_kg: float,
    safety_factor: float,
    object_weight_kg: Optional[float] = None,
) -> CapacityEvaluation:
    """
    Usable capacity at one hook position.

    Point evaluation derates first and then deducts dead weight:
      usable = gross / SF - (hook + block)
    Utilization is display-only: (W + dead) / gross * 100.
    """
    dead = float(dead_weight_kg)
    sf = float(safety_factor)
    weight = None if object_weight_kg is None else float(object_weight_kg)

    if gross_capacity_kg is None:
        return CapacityEvaluation(None, dead, sf, None, weight, None, None)

    gross = float(gross_capacity_kg)
    usable = gross / sf - dead
    utilization = None
    is_safe = None
    if weight is not None:
        is_safe = weight <= usable
        if gross > 0.0:
            utilization = (weight + dead) / gross * 100.0
    return CapacityEvaluation(gross, dead, sf, usable, weight, utilization, is_safe)


def lift_status(reachable: bool, cap: CapacityEvaluation) -> LiftStatus:
    """Reach first, then chart data, then the weight verdict."""
    if not reachable:
        return LiftStatus.UNREACHABLE
    if cap.gross_capacity_kg is None:
        return LiftStatus.CAPACITY_UNKNOWN
    if cap.is_safe is None:
        return LiftStatus.REACHABLE
    return LiftStatus.SAFE if cap.is_safe else LiftStatus.UNSAFE


def evaluate_lift(
    placement: CranePlacement,
    chart: ChartLike,
    target_x: float,
    target_y: float,
    target_top_z: float,
    object_weight_kg: Optional[float] = None,
) -> LiftEvaluation:
    geom = solve_lift_geometry(
        placement.position_x,
        placement.position_y,
        placement.position_z,
        placement.boom_length_m,
        target_x,
        target_y,
        target_top_z,
    )
    gross = capacity_at(chart, geom.horizontal_dist_m)
    cap = evaluate_capacity(gross, placement.dead_weight_kg, placement.safety_factor, object_weight_kg)
    return LiftEvaluation(geometry=geom, capacity=cap, status=lift_status(geom.reachable, cap))
