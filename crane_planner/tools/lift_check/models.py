from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ...engine.constants import BOOM_PIVOT_HEIGHT_M
from ...engine.load_chart import parse_load_chart_paste
from ...engine.models import LoadChartPoint

_DEFAULT_CHART = [
    LoadChartPoint(radius_m=10.0, capacity_kg=50000.0),
    LoadChartPoint(radius_m=20.0, capacity_kg=30000.0),
    LoadChartPoint(radius_m=30.0, capacity_kg=10000.0),
    LoadChartPoint(radius_m=40.0, capacity_kg=4000.0),
]


class LiftCheckInputs(BaseModel):
    """
    Inputs for a single pick: crane base, boom, target top and load chart.

    Workflow:
      1) Place the crane (base x/y/z) and choose the boom length.
      2) Give the target's plan position and the elevation of its top.
      3) Provide the load chart for the selected counterweight/boom, either as
         points or as text pasted from a spreadsheet.

    Dead weight (hook + lifting block) and safety factor are validated here because
    this is a user entry point; the engine itself does not check them.
    """

    crane_x_m: float = Field(0.0, description="Crane base X (m).")
    crane_y_m: float = Field(0.0, description="Crane base Y (m).")
    crane_z_m: float = Field(0.0, description="Crane base elevation (m).")
    boom_length_m: float = Field(40.0, gt=0.0, description="Boom length (m).")
    pivot_height_m: float = Field(BOOM_PIVOT_HEIGHT_M, ge=0.0, description="Boom pivot height above base (m).")

    target_x_m: float = Field(30.0, description="Target X (m).")
    target_y_m: float = Field(0.0, description="Target Y (m).")
    target_top_z_m: float = Field(20.0, description="Elevation of the target top (m).")

    object_weight_kg: Optional[float] = Field(None, ge=0.0, description="Object weight (kg); blank = unknown.")
    hook_weight_kg: float = Field(500.0, ge=0.0, description="Hook weight (kg).")
    lifting_block_kg: float = Field(200.0, ge=0.0, description="Lifting block weight (kg).")
    safety_factor: float = Field(1.25, gt=0.0, description="Safety factor (divisor).")

    load_chart: List[LoadChartPoint] = Field(default_factory=lambda: list(_DEFAULT_CHART))
    load_chart_text: Optional[str] = Field(None, description="Pasted radius/capacity rows; overrides load_chart.")

    @model_validator(mode="after")
    def _resolve_chart(self):
        if self.load_chart_text:
            self.load_chart = parse_load_chart_paste(self.load_chart_text)
            self.load_chart_text = None
        radii = [p.radius_m for p in self.load_chart]
        if len(set(radii)) != len(radii):
            raise ValueError("load_chart radii must be unique.")
        self.load_chart = sorted(self.load_chart, key=lambda p: p.radius_m)
        return self

    @property
    def dead_weight_kg(self) -> float:
        return self.hook_weight_kg + self.lifting_block_kg
