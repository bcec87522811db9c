from __future__ import annotations

import json
from typing import Any, Dict

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from crane_planner.core.paths import settings_path


class SchedulerSettings(BaseModel):
    """Timing knobs for the live markup preview (seconds)."""

    label_debounce_s: float = Field(0.15, ge=0.0, description="Debounce for label-only edits.")
    full_debounce_s: float = Field(0.30, ge=0.0, description="Debounce for geometry edits.")
    removal_verify_attempts: int = Field(5, ge=1, description="Polls of the host after a removal.")
    removal_verify_interval_s: float = Field(0.05, ge=0.0, description="Delay between removal polls.")
    settle_delay_s: float = Field(0.10, ge=0.0, description="Fallback wait when the host cannot confirm removal.")


def load_settings() -> Dict[str, Any]:
    p = settings_path()
    if not p.exists():
        return {}
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        return {}


def save_settings(data: Dict[str, Any]) -> None:
    p = settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2), encoding="utf-8")


def load_scheduler_settings(data: Dict[str, Any] | None = None) -> SchedulerSettings:
    """Validate the "scheduler" section of settings.json; defaults when absent or invalid."""
    raw = (load_settings() if data is None else data).get("scheduler") or {}
    try:
        return SchedulerSettings.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Invalid scheduler settings, using defaults: {e}")
        return SchedulerSettings()
