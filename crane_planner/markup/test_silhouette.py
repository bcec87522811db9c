from __future__ import annotations

from ..engine.constants import OUTRIGGER_SPREAD, RING_DASH_COUNT
from ..engine.load_chart import max_envelope
from ..engine.models import CraneModel, CranePlacement, LoadChart, LoadChartPoint, MarkupCategory
from .silhouette import (
    build_chassis,
    build_crane_markups,
    build_outriggers,
    build_position_label,
    build_rings,
    cabin_center,
    dashed_ring,
    ring_radii,
)

CRANE = CraneModel(
    id="c1",
    manufacturer="Liebherr",
    model="LTM 1100",
    max_height_m=60,
    max_radius_m=32,
    base_width_m=3,
    base_length_m=4,
)
CHART = LoadChart(
    crane_model_id="c1",
    counterweight_config_id="cw1",
    boom_length_m=40,
    points=[LoadChartPoint(radius_m=5, capacity_kg=60000), LoadChartPoint(radius_m=30, capacity_kg=8000)],
)


def _placement(**kw) -> CranePlacement:
    return CranePlacement(project_id="p1", crane_model_id="c1", **kw)


def _xs(group):
    return [p.x for s in group.segments for p in (s.start, s.end)]


def _ys(group):
    return [p.y for s in group.segments for p in (s.start, s.end)]


def test_chassis_shapes_are_separate_groups() -> None:
    groups = build_chassis(CRANE, _placement())
    # rectangle, turntable, boom outline, boom centerline, cabin, two cross strokes
    assert len(groups) == 7
    rect = groups[0]
    assert len(rect.segments) == 4
    assert min(_xs(rect)) == -1500 and max(_xs(rect)) == 1500
    assert min(_ys(rect)) == -2000 and max(_ys(rect)) == 2000


def test_chassis_follows_placement_transform() -> None:
    rect = build_chassis(CRANE, _placement(position_x=10, position_z=2, rotation_deg=90))[0]
    xs, ys = _xs(rect), _ys(rect)
    # rotated a quarter turn: the chassis length now runs along x
    assert abs(min(xs) - 8000) < 1e-6 and abs(max(xs) - 12000) < 1e-6
    assert abs(min(ys) + 1500) < 1e-6 and abs(max(ys) - 1500) < 1e-6
    assert all(p.z == 2000 for s in rect.segments for p in (s.start, s.end))


def test_cabin_offset_by_cab_position() -> None:
    assert cabin_center(CRANE)[1] < 0
    assert cabin_center(CRANE.model_copy(update={"cab_position": "front"}))[1] > 0
    assert cabin_center(CRANE.model_copy(update={"cab_position": "left"}))[0] < 0
    assert cabin_center(CRANE.model_copy(update={"cab_position": "right"}))[0] > 0


def test_outriggers_beam_and_pad_each() -> None:
    groups = build_outriggers(CRANE, _placement())
    assert len(groups) == 8
    pads = groups[1::2]
    centres = sorted((sum(_xs(g)) / len(_xs(g)), sum(_ys(g)) / len(_ys(g))) for g in pads)
    reach = OUTRIGGER_SPREAD * 1500
    assert abs(centres[0][0] + reach) < 1e-6
    assert abs(centres[-1][0] - reach) < 1e-6


def test_ring_radii_respect_limit() -> None:
    assert ring_radii(CRANE, _placement()) == [5, 10, 15, 20, 25, 30]
    assert ring_radii(CRANE, _placement(max_radius_limit_m=12)) == [5, 10]
    assert ring_radii(CRANE, _placement(max_radius_limit_m=100)) == [5, 10, 15, 20, 25, 30]
    assert ring_radii(CRANE, _placement(radius_step_m=8)) == [8, 16, 24, 32]


def test_dashed_ring_is_bounded_arcs() -> None:
    p = _placement()
    dashes = dashed_ring(p, 10, p.radius_color)
    assert len(dashes) == RING_DASH_COUNT
    assert all(len(d.segments) == 3 for d in dashes)


def test_rings_and_labels() -> None:
    bare = _placement(show_radius_labels=False, show_capacity_labels=False)
    assert len(build_rings(CRANE, bare)) == 6 * RING_DASH_COUNT
    assert build_rings(CRANE, _placement(show_radius_rings=False)) == []

    env = max_envelope([CHART], 500, 200, 1.25)
    radius_only = build_rings(CRANE, _placement(show_capacity_labels=False), env)
    with_capacity = build_rings(CRANE, _placement(), env)
    assert len(with_capacity) > len(radius_only) > len(build_rings(CRANE, bare))

    # no load chart -> no capacity text
    assert len(build_rings(CRANE, _placement())) == len(radius_only)


def test_capacity_labels_only_within_chart_radii() -> None:
    crane = CRANE.model_copy(update={"max_radius_m": 50})
    chart = CHART.model_copy(
        update={"points": [LoadChartPoint(radius_m=10, capacity_kg=20000), LoadChartPoint(radius_m=20, capacity_kg=8200)]}
    )
    env = max_envelope([chart], 500, 200, 1.25)
    p = _placement(radius_step_m=10, show_radius_labels=False)
    rings_only = build_rings(crane, p.model_copy(update={"show_capacity_labels": False}), env)
    assert len(rings_only) == 5 * RING_DASH_COUNT

    # dashes lie at z = 0, capacity text is lifted above them
    labels = [g for g in build_rings(crane, p, env) if min(pt.z for s in g.segments for pt in (s.start, s.end)) > 0]
    # "(15t)" at 10 m and "(6t)" at 20 m; nothing at 30, 40 or 50 m
    assert len(labels) == 5 + 4
    assert all(min(_xs(g)) < 30000 for g in labels)
    assert build_position_label(CRANE, _placement()) == []
    assert build_position_label(CRANE, _placement(label_text="   ")) == []
    groups = build_position_label(CRANE, _placement(label_text="K1"))
    # "K1" plus the stroked characters of "Liebherr LTM 1100"
    assert len(groups) == 2 + len("LiebherrLTM1100")


def test_markup_set_has_every_category() -> None:
    markups = build_crane_markups(CRANE, _placement(label_text="K1"))
    assert set(markups) == set(MarkupCategory)
    assert all(markups[c] for c in MarkupCategory)
