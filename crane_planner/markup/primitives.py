from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from ..engine.constants import MM_PER_M
from ..engine.models import RGBAColor

Point2 = Tuple[float, float]


def to_mm(meters: float) -> float:
    """The single metre -> millimetre conversion applied at the host boundary."""
    return float(meters) * MM_PER_M


@dataclass(frozen=True)
class Point3:
    x: float
    y: float
    z: float

    def as_host(self) -> Dict[str, float]:
        return {"positionX": self.x, "positionY": self.y, "positionZ": self.z}


@dataclass(frozen=True)
class LineSegment:
    start: Point3
    end: Point3


@dataclass(frozen=True)
class LineGroup:
    """
    One independently addressable stroke set (mm).

    The host joins consecutive points of a group into a polyline, so a group must
    never hold two shapes: one glyph, one polygon, one disjoint stroke.
    """

    color: RGBAColor
    segments: Tuple[LineSegment, ...]

    def as_host(self) -> Dict[str, Any]:
        return {
            "color": self.color.model_dump(),
            "segments": [{"start": s.start.as_host(), "end": s.end.as_host()} for s in self.segments],
        }

    def bounds_x(self) -> Tuple[float, float]:
        xs = [p.x for s in self.segments for p in (s.start, s.end)]
        return min(xs), max(xs)


def segments_between(points: Sequence[Point3], closed: bool) -> Tuple[LineSegment, ...]:
    pairs = list(zip(points, points[1:]))
    if closed and len(points) > 2:
        pairs.append((points[-1], points[0]))
    return tuple(LineSegment(a, b) for a, b in pairs)


def group_xy_m(points_m: Iterable[Point2], z_m: float, color: RGBAColor, closed: bool = True) -> LineGroup:
    """Planar shape in metres at elevation z -> host line group in mm."""
    z = to_mm(z_m)
    pts = [Point3(to_mm(x), to_mm(y), z) for x, y in points_m]
    return LineGroup(color=color, segments=segments_between(pts, closed=closed))


def batch_payload(groups: Iterable[LineGroup]) -> List[Dict[str, Any]]:
    return [g.as_host() for g in groups]
