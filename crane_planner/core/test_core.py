from __future__ import annotations

import sys

from loguru import logger

from .loader import discover_tools, tools_by_id
from .logging import configure_logging
from .schema_utils import validate_inputs
from .settings import SchedulerSettings, load_scheduler_settings, load_settings, save_settings


def test_scheduler_settings_defaults_and_overrides() -> None:
    assert load_scheduler_settings({}) == SchedulerSettings()
    s = load_scheduler_settings({"scheduler": {"full_debounce_s": 0.5, "removal_verify_attempts": 2}})
    assert s.full_debounce_s == 0.5
    assert s.removal_verify_attempts == 2
    assert s.label_debounce_s == SchedulerSettings().label_debounce_s


def test_invalid_scheduler_settings_fall_back() -> None:
    assert load_scheduler_settings({"scheduler": {"label_debounce_s": -1}}) == SchedulerSettings()


def test_settings_file_roundtrip(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CRANE_PLANNER_HOME", str(tmp_path))
    assert load_settings() == {}
    save_settings({"scheduler": {"settle_delay_s": 0.25}})
    assert load_scheduler_settings().settle_delay_s == 0.25
    assert (tmp_path / "CranePlanner" / "settings.json").exists()


def test_tool_discovery() -> None:
    tools = discover_tools()
    assert "lift_check" in [t.meta.id for t in tools]
    assert [t.meta.id for t in discover_tools(category="cranes")] == ["lift_check"]
    assert discover_tools(category="Nothing Here") == []
    assert tools_by_id()["lift_check"].meta.category == "Cranes"


def test_validate_inputs() -> None:
    tool = tools_by_id()["lift_check"]
    data, err = validate_inputs(tool.InputModel, {"boom_length_m": 25})
    assert err is None
    assert data["boom_length_m"] == 25
    data, err = validate_inputs(tool.InputModel, {"safety_factor": 0})
    assert data == {} and "safety_factor" in err
    assert validate_inputs(None, {"a": 1}) == ({"a": 1}, None)


def test_configure_logging_writes_file(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CRANE_PLANNER_HOME", str(tmp_path))
    configure_logging("DEBUG")
    try:
        logger.info("planner log check")
        logger.complete()
    finally:
        logger.remove()
        logger.add(sys.stderr)
    text = (tmp_path / "CranePlanner" / "logs" / "crane_planner.log").read_text(encoding="utf-8")
    assert "planner log check" in text
