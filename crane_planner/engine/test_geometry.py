from __future__ import annotations

import math

from .geometry import arc_points, centered_rect, circle_points, place_xy, rotate_xy, solve_lift_geometry


def test_target_beyond_boom_is_unreachable() -> None:
    g = solve_lift_geometry(0, 0, 0, 20, 30, 0, 0)
    assert g.reachable is False
    assert g.boom_angle_deg == 0.0
    assert g.chain_length_m == 0.0
    assert g.horizontal_dist_m == 30.0


def test_boom_vertical_and_horizontal_limits() -> None:
    g = solve_lift_geometry(5, 5, 0, 40, 5, 5, 0)
    assert abs(g.boom_angle_deg - 90.0) < 1e-9
    assert abs(g.boom_tip_height_m - 43.5) < 1e-9

    g = solve_lift_geometry(0, 0, 0, 40, 40, 0, 0)
    assert g.boom_angle_deg == 0.0
    assert abs(g.boom_tip_elevation_m - 3.5) < 1e-9


def test_reference_pick_two_metres_of_chain() -> None:
    tip = 3.5 + 40 * math.sin(math.acos(30 / 40))
    g = solve_lift_geometry(0, 0, 0, 40, 18, 24, tip - 2.0)
    assert g.reachable is True
    assert abs(g.horizontal_dist_m - 30.0) < 1e-9
    assert abs(g.boom_angle_deg - 41.41) < 0.01
    assert abs(g.chain_length_m - 2.0) < 1e-9


def test_target_above_tip_not_reachable() -> None:
    g = solve_lift_geometry(0, 0, 10, 40, 30, 0, 60)
    assert g.chain_length_m < 0
    assert g.reachable is False
    assert g.boom_angle_deg > 0


def test_base_elevation_shifts_tip_only() -> None:
    a = solve_lift_geometry(0, 0, 0, 40, 30, 0, 0)
    b = solve_lift_geometry(0, 0, 12, 40, 30, 0, 0)
    assert abs(b.boom_tip_elevation_m - a.boom_tip_elevation_m - 12) < 1e-9
    assert abs(b.boom_tip_height_m - a.boom_tip_height_m) < 1e-9


def test_non_positive_boom_rejected() -> None:
    try:
        solve_lift_geometry(0, 0, 0, 0, 1, 1, 0)
    except ValueError:
        return
    raise AssertionError("zero boom length accepted")


def test_rotation_and_placement() -> None:
    x, y = rotate_xy(1, 0, 90)
    assert abs(x) < 1e-12 and abs(y - 1) < 1e-12
    pts = place_xy([(0, 1)], 10, 20, 180)
    assert abs(pts[0][0] - 10) < 1e-12 and abs(pts[0][1] - 19) < 1e-12


def test_shape_helpers() -> None:
    rect = centered_rect(0, 0, 2, 4)
    assert len(rect) == 4
    assert {p[0] for p in rect} == {-1, 1}
    circle = circle_points(0, 0, 3, 24)
    assert len(circle) == 24
    assert all(abs(math.hypot(*p) - 3) < 1e-9 for p in circle)
    arc = arc_points(0, 0, 5, 0.0, math.pi / 2, 3)
    assert len(arc) == 4
    assert abs(arc[-1][1] - 5) < 1e-9
