from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..engine.constants import GLYPH_DEFAULT_WIDTH, GLYPH_SPACING_RATIO
from ..engine.models import RGBAColor
from .primitives import LineGroup, LineSegment, Point3

Stroke = Tuple[float, float, float, float]  # x1, y1, x2, y2 in glyph units (cap height = 1)

# Single-stroke font for labels drawn as scene line markups. Pure data: char -> (advance, strokes).
STROKE_FONT: Dict[str, Tuple[float, Tuple[Stroke, ...]]] = {
    "0": (0.6, ((0, 0, 0.6, 0), (0.6, 0, 0.6, 1), (0.6, 1, 0, 1), (0, 1, 0, 0))),
    "1": (0.3, ((0.15, 0, 0.15, 1), (0, 0.8, 0.15, 1))),
    "2": (0.6, ((0, 1, 0.6, 1), (0.6, 1, 0.6, 0.5), (0.6, 0.5, 0, 0.5), (0, 0.5, 0, 0), (0, 0, 0.6, 0))),
    "3": (0.6, ((0, 1, 0.6, 1), (0.6, 1, 0.6, 0), (0.6, 0, 0, 0), (0, 0.5, 0.6, 0.5))),
    "4": (0.6, ((0, 1, 0, 0.5), (0, 0.5, 0.6, 0.5), (0.6, 1, 0.6, 0))),
    "5": (0.6, ((0.6, 1, 0, 1), (0, 1, 0, 0.5), (0, 0.5, 0.6, 0.5), (0.6, 0.5, 0.6, 0), (0.6, 0, 0, 0))),
    "6": (0.6, ((0.6, 1, 0, 1), (0, 1, 0, 0), (0, 0, 0.6, 0), (0.6, 0, 0.6, 0.5), (0.6, 0.5, 0, 0.5))),
    "7": (0.6, ((0, 1, 0.6, 1), (0.6, 1, 0.3, 0))),
    "8": (0.6, ((0, 0, 0.6, 0), (0.6, 0, 0.6, 1), (0.6, 1, 0, 1), (0, 1, 0, 0), (0, 0.5, 0.6, 0.5))),
    "9": (0.6, ((0.6, 0, 0.6, 1), (0.6, 1, 0, 1), (0, 1, 0, 0.5), (0, 0.5, 0.6, 0.5))),
    "A": (0.6, ((0, 0, 0.3, 1), (0.3, 1, 0.6, 0), (0.12, 0.4, 0.48, 0.4))),
    "B": (0.6, (
        (0, 0, 0, 1), (0, 1, 0.45, 1), (0.45, 1, 0.55, 0.9), (0.55, 0.9, 0.55, 0.6), (0.55, 0.6, 0.45, 0.5),
        (0, 0.5, 0.45, 0.5), (0.45, 0.5, 0.6, 0.4), (0.6, 0.4, 0.6, 0.1), (0.6, 0.1, 0.5, 0), (0.5, 0, 0, 0),
    )),
    "C": (0.6, ((0.6, 1, 0, 1), (0, 1, 0, 0), (0, 0, 0.6, 0))),
    "D": (0.6, ((0, 0, 0, 1), (0, 1, 0.4, 1), (0.4, 1, 0.6, 0.75), (0.6, 0.75, 0.6, 0.25), (0.6, 0.25, 0.4, 0), (0.4, 0, 0, 0))),
    "E": (0.6, ((0.6, 1, 0, 1), (0, 1, 0, 0), (0, 0, 0.6, 0), (0, 0.5, 0.45, 0.5))),
    "F": (0.6, ((0.6, 1, 0, 1), (0, 1, 0, 0), (0, 0.5, 0.45, 0.5))),
    "G": (0.6, ((0.6, 1, 0, 1), (0, 1, 0, 0), (0, 0, 0.6, 0), (0.6, 0, 0.6, 0.45), (0.6, 0.45, 0.3, 0.45))),
    "H": (0.6, ((0, 0, 0, 1), (0.6, 0, 0.6, 1), (0, 0.5, 0.6, 0.5))),
    "I": (0.3, ((0.15, 0, 0.15, 1), (0, 1, 0.3, 1), (0, 0, 0.3, 0))),
    "J": (0.6, ((0.6, 1, 0.6, 0), (0.6, 0, 0, 0), (0, 0, 0, 0.3))),
    "K": (0.6, ((0, 0, 0, 1), (0, 0.5, 0.6, 1), (0, 0.5, 0.6, 0))),
    "L": (0.6, ((0, 1, 0, 0), (0, 0, 0.6, 0))),
    "M": (0.8, ((0, 0, 0, 1), (0, 1, 0.4, 0.5), (0.4, 0.5, 0.8, 1), (0.8, 1, 0.8, 0))),
    "N": (0.6, ((0, 0, 0, 1), (0, 1, 0.6, 0), (0.6, 0, 0.6, 1))),
    "O": (0.6, ((0, 0, 0.6, 0), (0.6, 0, 0.6, 1), (0.6, 1, 0, 1), (0, 1, 0, 0))),
    "P": (0.6, ((0, 0, 0, 1), (0, 1, 0.6, 1), (0.6, 1, 0.6, 0.5), (0.6, 0.5, 0, 0.5))),
    "Q": (0.6, ((0, 0, 0.6, 0), (0.6, 0, 0.6, 1), (0.6, 1, 0, 1), (0, 1, 0, 0), (0.35, 0.25, 0.6, -0.1))),
    "R": (0.6, ((0, 0, 0, 1), (0, 1, 0.6, 1), (0.6, 1, 0.6, 0.5), (0.6, 0.5, 0, 0.5), (0.2, 0.5, 0.6, 0))),
    "S": (0.6, ((0.6, 1, 0, 1), (0, 1, 0, 0.5), (0, 0.5, 0.6, 0.5), (0.6, 0.5, 0.6, 0), (0.6, 0, 0, 0))),
    "T": (0.6, ((0, 1, 0.6, 1), (0.3, 1, 0.3, 0))),
    "U": (0.6, ((0, 1, 0, 0), (0, 0, 0.6, 0), (0.6, 0, 0.6, 1))),
    "V": (0.6, ((0, 1, 0.3, 0), (0.3, 0, 0.6, 1))),
    "W": (0.8, ((0, 1, 0.2, 0), (0.2, 0, 0.4, 0.6), (0.4, 0.6, 0.6, 0), (0.6, 0, 0.8, 1))),
    "X": (0.6, ((0, 0, 0.6, 1), (0, 1, 0.6, 0))),
    "Y": (0.6, ((0, 1, 0.3, 0.5), (0.6, 1, 0.3, 0.5), (0.3, 0.5, 0.3, 0))),
    "Z": (0.6, ((0, 1, 0.6, 1), (0.6, 1, 0, 0), (0, 0, 0.6, 0))),
    "m": (0.8, ((0, 0, 0, 0.7), (0, 0.7, 0.4, 0.35), (0.4, 0.35, 0.8, 0.7), (0.8, 0.7, 0.8, 0))),
    "t": (0.5, ((0.25, 0, 0.25, 0.7), (0, 0.7, 0.5, 0.7))),
    "k": (0.5, ((0, 0, 0, 1), (0, 0.35, 0.5, 0.7), (0.15, 0.45, 0.5, 0))),
    "g": (0.5, ((0.5, 0.7, 0, 0.7), (0, 0.7, 0, 0.3), (0, 0.3, 0.5, 0.3), (0.5, 0.7, 0.5, -0.2), (0.5, -0.2, 0, -0.2))),
    "(": (0.3, ((0.3, 1, 0.1, 0.75), (0.1, 0.75, 0.1, 0.25), (0.1, 0.25, 0.3, 0))),
    ")": (0.3, ((0, 1, 0.2, 0.75), (0.2, 0.75, 0.2, 0.25), (0.2, 0.25, 0, 0))),
    ".": (0.2, ((0.1, 0, 0.1, 0.1),)),
    ",": (0.2, ((0.1, 0.1, 0.05, -0.1),)),
    ":": (0.2, ((0.1, 0.2, 0.1, 0.3), (0.1, 0.7, 0.1, 0.8))),
    "-": (0.4, ((0.05, 0.5, 0.35, 0.5),)),
    "+": (0.5, ((0.25, 0.25, 0.25, 0.75), (0, 0.5, 0.5, 0.5))),
    "/": (0.4, ((0, 0, 0.4, 1),)),
    "%": (0.6, ((0, 0, 0.6, 1), (0.05, 0.85, 0.15, 0.85), (0.45, 0.15, 0.55, 0.15))),
    " ": (0.3, ()),
}


def glyph_for(ch: str) -> Optional[Tuple[float, Tuple[Stroke, ...]]]:
    g = STROKE_FONT.get(ch)
    if g is None and ch.swapcase() != ch:
        g = STROKE_FONT.get(ch.swapcase())
    return g


def advance_width(ch: str) -> float:
    g = glyph_for(ch)
    return GLYPH_DEFAULT_WIDTH if g is None else g[0]


def measure_text(text: str, height_mm: float, spacing_ratio: float = GLYPH_SPACING_RATIO) -> float:
    """Horizontal span of laid-out text: scaled advances plus (n - 1) gaps."""
    if not text:
        return 0.0
    spacing = height_mm * spacing_ratio
    return sum(advance_width(ch) * height_mm for ch in text) + spacing * (len(text) - 1)


def render_text(
    text: str,
    origin_x: float,
    origin_y: float,
    z: float,
    height_mm: float,
    color: RGBAColor,
    spacing_ratio: float = GLYPH_SPACING_RATIO,
) -> List[LineGroup]:
    """
    Lay text out left to right in the vertical x/z plane at y = origin_y (mm).

    Every character becomes its own LineGroup. Characters without strokes
    (space, unmapped) only advance the cursor.
    """
    groups: List[LineGroup] = []
    spacing = height_mm * spacing_ratio
    cursor = float(origin_x)
    for ch in text:
        g = glyph_for(ch)
        width, strokes = (GLYPH_DEFAULT_WIDTH, ()) if g is None else g
        if strokes:
            segs = tuple(
                LineSegment(
                    Point3(cursor + x1 * height_mm, origin_y, z + y1 * height_mm),
                    Point3(cursor + x2 * height_mm, origin_y, z + y2 * height_mm),
                )
                for x1, y1, x2, y2 in strokes
            )
            groups.append(LineGroup(color=color, segments=segs))
        cursor += width * height_mm + spacing
    return groups


def render_text_centered(
    text: str,
    center_x: float,
    origin_y: float,
    z: float,
    height_mm: float,
    color: RGBAColor,
) -> List[LineGroup]:
    return render_text(text, center_x - measure_text(text, height_mm) / 2.0, origin_y, z, height_mm, color)
