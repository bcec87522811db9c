from __future__ import annotations

# Host scene works in millimetres; everything upstream of the markup boundary is metres.
MM_PER_M = 1000.0

# Boom pivot sits this far above the crane base (model constant, m).
BOOM_PIVOT_HEIGHT_M = 3.5

# Slack on the ring count ratio r_max / step so 30 / 10 yields 3 rings, not 2.
RING_COUNT_EPS = 1e-9

# Silhouette proportions (relative to chassis dimensions unless noted)
OUTRIGGER_SPREAD = 1.8          # pad centre at 1.8 x chassis half-width
OUTRIGGER_PAD_SIZE_M = 0.6
TURNTABLE_RADIUS_RATIO = 0.35   # of chassis width
TURNTABLE_SEGMENTS = 24
BOOM_LENGTH_RATIO = 1.25        # of chassis length
BOOM_BASE_WIDTH_RATIO = 0.30    # of chassis width
BOOM_TIP_WIDTH_RATIO = 0.15
CABIN_WIDTH_RATIO = 0.35
CABIN_LENGTH_RATIO = 0.25
CENTER_CROSS_SIZE_M = 0.5

# Radius rings
RING_DASH_COUNT = 36
RING_DASH_RATIO = 0.6           # dash : (dash + gap)
RING_DASH_SUBDIVISIONS = 3
RING_LABEL_OFFSET_M = 0.2
RING_LABEL_HEIGHT_M = 0.5
CAPACITY_LABEL_LINE_RATIO = 1.4  # capacity text sits this many text heights above the radius text

# Position label
POSITION_LABEL_CLEARANCE_M = 2.0

# Stroke font
GLYPH_SPACING_RATIO = 0.15
GLYPH_DEFAULT_WIDTH = 0.5
