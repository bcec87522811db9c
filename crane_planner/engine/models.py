from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CabPosition = Literal["front", "rear", "left", "right"]
CraneType = Literal["mobile", "tower", "crawler"]


class MarkupCategory(str, Enum):
    CHASSIS = "chassis"
    OUTRIGGERS = "outriggers"
    RINGS = "rings"
    POSITION_LABEL = "positionLabel"


class RGBAColor(BaseModel):
    model_config = ConfigDict(frozen=True)

    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)
    a: int = Field(255, ge=0, le=255)

    def with_alpha(self, a: int) -> "RGBAColor":
        return self.model_copy(update={"a": int(a)})


DEFAULT_CRANE_COLOR = RGBAColor(r=255, g=165, b=0, a=255)
DEFAULT_RADIUS_COLOR = RGBAColor(r=255, g=0, b=0, a=128)
DEFAULT_LABEL_COLOR = RGBAColor(r=0, g=0, b=0, a=255)


class CraneModel(BaseModel):
    """
    Crane reference data (immutable).

    Dimensions are metres. `cab_position` says which chassis side carries the cabin;
    the silhouette builder uses it to place the cabin rectangle.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    manufacturer: str
    model: str
    crane_type: CraneType = "mobile"
    max_capacity_kg: Optional[float] = Field(None, ge=0.0)
    max_height_m: float = Field(..., gt=0.0)
    max_radius_m: float = Field(..., gt=0.0)
    min_radius_m: float = Field(3.0, ge=0.0)
    base_width_m: float = Field(3.0, gt=0.0)
    base_length_m: float = Field(4.0, gt=0.0)
    cab_position: CabPosition = "rear"
    default_boom_length_m: Optional[float] = Field(None, gt=0.0)
    default_crane_color: RGBAColor = DEFAULT_CRANE_COLOR
    default_radius_color: RGBAColor = DEFAULT_RADIUS_COLOR

    @property
    def display_name(self) -> str:
        return f"{self.manufacturer} {self.model}"


class CounterweightConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    crane_model_id: str
    name: str
    weight_kg: float = Field(..., ge=0.0)
    description: Optional[str] = None
    sort_order: int = 0


class LoadChartPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    radius_m: float = Field(..., ge=0.0)
    capacity_kg: float = Field(..., ge=0.0)


class LoadChart(BaseModel):
    """Gross capacity by radius for one (crane, counterweight, boom length) combination."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    crane_model_id: str
    counterweight_config_id: str
    boom_length_m: float = Field(..., gt=0.0)
    points: List[LoadChartPoint] = Field(default_factory=list)

    @field_validator("points")
    @classmethod
    def _unique_radii(cls, v: List[LoadChartPoint]) -> List[LoadChartPoint]:
        radii = [p.radius_m for p in v]
        if len(set(radii)) != len(radii):
            raise ValueError("load chart radii must be unique within one chart.")
        return sorted(v, key=lambda p: p.radius_m)


class CranePlacement(BaseModel):
    """
    One crane instance in a project. Position is metres in host coordinates,
    rotation is degrees about the vertical axis.

    `primitive_ids` is maintained by the markup scheduler, never by the user.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[str] = None
    project_id: str
    crane_model_id: str
    counterweight_config_id: Optional[str] = None

    position_x: float = 0.0
    position_y: float = 0.0
    position_z: float = 0.0
    rotation_deg: float = 0.0

    boom_length_m: float = Field(40.0, gt=0.0)
    hook_weight_kg: float = 500.0
    lifting_block_kg: float = 200.0
    safety_factor: float = 1.25

    show_radius_rings: bool = True
    radius_step_m: float = Field(5.0, gt=0.0)
    max_radius_limit_m: Optional[float] = None
    show_radius_labels: bool = True
    show_capacity_labels: bool = True
    crane_color: RGBAColor = DEFAULT_CRANE_COLOR
    radius_color: RGBAColor = DEFAULT_RADIUS_COLOR

    label_text: Optional[str] = None
    label_height_m: float = Field(0.5, gt=0.0)
    label_color: Optional[RGBAColor] = None

    notes: Optional[str] = None
    primitive_ids: Dict[MarkupCategory, List[int]] = Field(default_factory=dict)

    @property
    def dead_weight_kg(self) -> float:
        return float(self.hook_weight_kg) + float(self.lifting_block_kg)

    def all_primitive_ids(self) -> List[int]:
        return [i for ids in self.primitive_ids.values() for i in ids]

    def moved(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "CranePlacement":
        return self.model_copy(
            update={
                "position_x": self.position_x + dx,
                "position_y": self.position_y + dy,
                "position_z": self.position_z + dz,
            }
        )

    def rotated(self, degrees: float) -> "CranePlacement":
        return self.model_copy(update={"rotation_deg": (self.rotation_deg + degrees) % 360.0})


@dataclass
class PreviewState:
    """Working copy of a placement while it is edited. Never carries a saved id."""

    placement: CranePlacement
    crane: CraneModel
    charts: List[LoadChart] = field(default_factory=list)
    source_id: Optional[str] = None  # id of the saved placement being edited, if any

    def __post_init__(self) -> None:
        if self.placement.id is not None:
            self.source_id = self.source_id or self.placement.id
            self.placement = self.placement.model_copy(update={"id": None, "primitive_ids": {}})
