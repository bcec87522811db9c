from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ...engine.capacity import LiftStatus, evaluate_capacity, lift_status
from ...engine.geometry import horizontal_distance, solve_lift_geometry
from ...engine.load_chart import calculate_load_capacities, capacity_at, find_max_radius_for_load
from .calc_trace import CalcTrace, compute_step
from .models import LiftCheckInputs


@dataclass(frozen=True)
class LiftCheckResult:
    horizontal_dist_m: float
    boom_angle_deg: float
    boom_tip_elevation_m: float
    chain_length_m: float
    reachable: bool
    gross_capacity_kg: Optional[float]
    usable_capacity_kg: Optional[float]
    utilization_pct: Optional[float]
    is_safe: Optional[bool]
    max_radius_for_load_m: Optional[float]
    status: LiftStatus


def evaluate_lift_traced(trace: CalcTrace, inp: LiftCheckInputs) -> LiftCheckResult:
    """
    Same numbers as engine.capacity.evaluate_lift, recorded step by step.

    Each step's value is produced by the engine function so the trace can never
    disagree with what the live preview shows.
    """
    geom = solve_lift_geometry(
        inp.crane_x_m,
        inp.crane_y_m,
        inp.crane_z_m,
        inp.boom_length_m,
        inp.target_x_m,
        inp.target_y_m,
        inp.target_top_z_m,
        pivot_height_m=inp.pivot_height_m,
    )

    d = compute_step(
        trace,
        id="G1",
        section="Geometry",
        title="Horizontal distance crane to target",
        output_symbol="d",
        equation="d = sqrt((x_t - x_c)^2 + (y_t - y_c)^2)",
        variables=[
            {"symbol": "x_t", "description": "Target X", "value": inp.target_x_m, "units": "m"},
            {"symbol": "y_t", "description": "Target Y", "value": inp.target_y_m, "units": "m"},
            {"symbol": "x_c", "description": "Crane X", "value": inp.crane_x_m, "units": "m"},
            {"symbol": "y_c", "description": "Crane Y", "value": inp.crane_y_m, "units": "m"},
        ],
        compute_fn=lambda: horizontal_distance(inp.crane_x_m, inp.crane_y_m, inp.target_x_m, inp.target_y_m),
        units="m",
    )

    if d > inp.boom_length_m:
        trace.steps[-1].notes.append("d exceeds the boom length; target is out of reach.")
    else:
        compute_step(
            trace,
            id="G2",
            section="Geometry",
            title="Boom angle from horizontal",
            output_symbol="theta",
            equation="theta = acos(d / L)",
            variables=[
                {"symbol": "d", "description": "Horizontal distance", "value": round(d, 3), "units": "m"},
                {"symbol": "L", "description": "Boom length", "value": inp.boom_length_m, "units": "m"},
            ],
            compute_fn=lambda: geom.boom_angle_deg,
            units="deg",
            decimals=2,
        )
        compute_step(
            trace,
            id="G3",
            section="Geometry",
            title="Boom tip elevation",
            output_symbol="z_tip",
            equation="z_tip = z_c + h_p + L * sin(theta)",
            variables=[
                {"symbol": "z_c", "description": "Crane base elevation", "value": inp.crane_z_m, "units": "m"},
                {"symbol": "h_p", "description": "Boom pivot height", "value": inp.pivot_height_m, "units": "m"},
                {"symbol": "L", "description": "Boom length", "value": inp.boom_length_m, "units": "m"},
                {"symbol": "theta", "description": "Boom angle", "value": round(geom.boom_angle_deg, 2), "units": "deg"},
            ],
            compute_fn=lambda: geom.boom_tip_elevation_m,
            units="m",
        )
        compute_step(
            trace,
            id="G4",
            section="Geometry",
            title="Chain length above target top",
            output_symbol="c",
            equation="c = z_tip - z_top",
            variables=[
                {"symbol": "z_tip", "description": "Boom tip elevation", "value": round(geom.boom_tip_elevation_m, 3), "units": "m"},
                {"symbol": "z_top", "description": "Target top elevation", "value": inp.target_top_z_m, "units": "m"},
            ],
            compute_fn=lambda: geom.chain_length_m,
            units="m",
            checks_builder=lambda c: [
                {
                    "label": "Boom tip clears target top",
                    "demand": inp.target_top_z_m,
                    "capacity": geom.boom_tip_elevation_m,
                    "ratio": (inp.target_top_z_m / geom.boom_tip_elevation_m) if geom.boom_tip_elevation_m else math.inf,
                    "pass_fail": "PASS" if c > 0.0 else "FAIL",
                }
            ],
        )

    gross = capacity_at(inp.load_chart, d)
    cap = evaluate_capacity(gross, inp.dead_weight_kg, inp.safety_factor, inp.object_weight_kg)

    if gross is None:
        trace.summary["capacity_note"] = "No load chart points; capacity unknown."
    else:
        compute_step(
            trace,
            id="C1",
            section="Capacity",
            title="Gross chart capacity at radius",
            output_symbol="Q_g",
            equation="Q_g = interp(chart, d)",
            variables=[{"symbol": "d", "description": "Working radius", "value": round(d, 3), "units": "m"}],
            compute_fn=lambda: gross,
            units="kg",
            decimals=0,
        )
        compute_step(
            trace,
            id="C2",
            section="Capacity",
            title="Usable capacity",
            output_symbol="Q_u",
            equation="Q_u = Q_g / SF - (W_h + W_b)",
            variables=[
                {"symbol": "Q_g", "description": "Gross capacity", "value": round(gross), "units": "kg"},
                {"symbol": "SF", "description": "Safety factor", "value": inp.safety_factor, "units": "-"},
                {"symbol": "W_h", "description": "Hook weight", "value": inp.hook_weight_kg, "units": "kg"},
                {"symbol": "W_b", "description": "Lifting block weight", "value": inp.lifting_block_kg, "units": "kg"},
            ],
            compute_fn=lambda: cap.usable_capacity_kg,
            units="kg",
            decimals=0,
        )
        if cap.object_weight_kg is not None and cap.utilization_pct is not None:
            compute_step(
                trace,
                id="C3",
                section="Capacity",
                title="Chart utilization",
                output_symbol="U",
                equation="U = (W + W_h + W_b) / Q_g * 100",
                variables=[
                    {"symbol": "W", "description": "Object weight", "value": cap.object_weight_kg, "units": "kg"},
                    {"symbol": "W_h", "description": "Hook weight", "value": inp.hook_weight_kg, "units": "kg"},
                    {"symbol": "W_b", "description": "Lifting block weight", "value": inp.lifting_block_kg, "units": "kg"},
                    {"symbol": "Q_g", "description": "Gross capacity", "value": round(gross), "units": "kg"},
                ],
                compute_fn=lambda: cap.utilization_pct,
                units="%",
                decimals=1,
                checks_builder=lambda _u: [
                    {
                        "label": "Object weight <= usable capacity",
                        "demand": cap.object_weight_kg,
                        "capacity": cap.usable_capacity_kg,
                        "ratio": (cap.object_weight_kg / cap.usable_capacity_kg)
                        if cap.usable_capacity_kg and cap.usable_capacity_kg > 0
                        else math.inf,
                        "pass_fail": "PASS" if cap.is_safe else "FAIL",
                    }
                ],
            )

    trace.tables["load_capacities"] = [
        row.__dict__
        for row in calculate_load_capacities(inp.load_chart, inp.hook_weight_kg, inp.lifting_block_kg, inp.safety_factor)
    ]

    max_radius = None
    if inp.object_weight_kg is not None:
        max_radius = find_max_radius_for_load(
            inp.load_chart, inp.object_weight_kg, inp.hook_weight_kg, inp.lifting_block_kg, inp.safety_factor
        )

    return LiftCheckResult(
        horizontal_dist_m=geom.horizontal_dist_m,
        boom_angle_deg=geom.boom_angle_deg,
        boom_tip_elevation_m=geom.boom_tip_elevation_m,
        chain_length_m=geom.chain_length_m,
        reachable=geom.reachable,
        gross_capacity_kg=cap.gross_capacity_kg,
        usable_capacity_kg=cap.usable_capacity_kg,
        utilization_pct=cap.utilization_pct,
        is_safe=cap.is_safe,
        max_radius_for_load_m=max_radius,
        status=lift_status(geom.reachable, cap),
    )


def result_rows(result: LiftCheckResult) -> List[Dict[str, Any]]:
    """Flat key/value rows for the summary sheet and PDF."""
    out: List[Dict[str, Any]] = []
    for k, v in result.__dict__.items():
        out.append({"key": k, "value": v.value if isinstance(v, LiftStatus) else v})
    return out
