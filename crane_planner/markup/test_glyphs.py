from __future__ import annotations

from ..engine.constants import GLYPH_DEFAULT_WIDTH, GLYPH_SPACING_RATIO
from ..engine.models import RGBAColor
from .glyphs import STROKE_FONT, advance_width, measure_text, render_text, render_text_centered

BLACK = RGBAColor()


def test_one_group_per_character() -> None:
    groups = render_text("12.5m", 0, 0, 0, 100, BLACK)
    assert len(groups) == 5
    for g, ch in zip(groups, "12.5m"):
        assert len(g.segments) == len(STROKE_FONT[ch][1])


def test_span_is_widths_plus_spacing() -> None:
    text = "12.5m"
    h = 100.0
    expected = sum(STROKE_FONT[c][0] for c in text) * h + GLYPH_SPACING_RATIO * h * (len(text) - 1)
    assert abs(measure_text(text, h) - expected) < 1e-9
    groups = render_text(text, 0, 0, 0, h, BLACK)
    # "1" starts at x=0 and "m" reaches its full advance
    assert abs(groups[0].bounds_x()[0]) < 1e-9
    assert abs(groups[-1].bounds_x()[1] - expected) < 1e-9


def test_glyphs_never_share_a_group() -> None:
    h = 100.0
    groups = render_text("808", 0, 0, 0, h, BLACK)
    cell = STROKE_FONT["8"][0] * h + GLYPH_SPACING_RATIO * h
    for i, g in enumerate(groups):
        lo, hi = g.bounds_x()
        assert lo >= i * cell - 1e-9
        assert hi <= i * cell + STROKE_FONT["8"][0] * h + 1e-9


def test_whitespace_and_unmapped_only_advance() -> None:
    assert len(render_text("A B", 0, 0, 0, 10, BLACK)) == 2
    assert render_text("€", 0, 0, 0, 10, BLACK) == []
    assert advance_width("€") == GLYPH_DEFAULT_WIDTH
    shifted = render_text("€A", 0, 0, 0, 10, BLACK)
    assert abs(shifted[0].bounds_x()[0] - (GLYPH_DEFAULT_WIDTH * 10 + GLYPH_SPACING_RATIO * 10)) < 1e-9


def test_lowercase_falls_back_to_capitals() -> None:
    assert len(render_text("crane", 0, 0, 0, 10, BLACK)) == 5


def test_text_lies_in_vertical_plane() -> None:
    groups = render_text("7", 1000, 2000, 3000, 500, BLACK)
    pts = [p for s in groups[0].segments for p in (s.start, s.end)]
    assert all(p.y == 2000 for p in pts)
    assert max(p.z for p in pts) == 3500


def test_centered_text() -> None:
    h = 100.0
    groups = render_text_centered("10", 0, 0, 0, h, BLACK)
    half = measure_text("10", h) / 2.0
    assert abs(groups[0].bounds_x()[0] + half) < 1e-9
    assert abs(groups[-1].bounds_x()[1] - half) < 1e-9
