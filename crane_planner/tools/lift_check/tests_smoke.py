from __future__ import annotations

import json
from pathlib import Path

from openpyxl import load_workbook
from pydantic import ValidationError

from .tool import TOOL


def _check_outputs(run_dir: Path) -> None:
    for name in ("report.pdf", "calc_trace.json", "results.json", "results.xlsx", "run.log"):
        assert (run_dir / name).exists(), f"Missing: {run_dir / name}"


def test_smoke_default_inputs(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CRANE_PLANNER_HOME", str(tmp_path))
    res = TOOL.run_batch(TOOL.default_inputs())
    assert res["ok"] is True
    run_dir = Path(res["run_dir"])
    assert tmp_path in run_dir.parents
    _check_outputs(run_dir)

    trace = json.loads((run_dir / "calc_trace.json").read_text(encoding="utf-8"))
    assert trace["meta"]["input_hash"] == res["input_hash"]
    assert trace["steps"]
    wb = load_workbook(run_dir / "results.xlsx")
    assert {"Inputs", "Assumptions", "Calcs", "Load chart", "Results"} <= set(wb.sheetnames)
    assert "Batch run complete" in (run_dir / "run.log").read_text(encoding="utf-8")


def test_smoke_heavy_pick_out_of_reach(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CRANE_PLANNER_HOME", str(tmp_path))
    inputs = TOOL.default_inputs()
    inputs.update({"target_x_m": 45.0, "object_weight_kg": 12000.0, "load_chart_text": "10;50\n40;4"})
    res = TOOL.run_batch(inputs)
    assert res["ok"] is True
    assert res["status"] == "unreachable"
    assert res["reachable"] is False
    _check_outputs(Path(res["run_dir"]))


def test_invalid_inputs_raise_before_run_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CRANE_PLANNER_HOME", str(tmp_path))
    inputs = TOOL.default_inputs()
    inputs["safety_factor"] = 0.0
    try:
        TOOL.run_batch(inputs)
    except ValidationError:
        assert not (tmp_path / "CranePlanner" / TOOL.meta.id).exists()
        return
    raise AssertionError("invalid inputs accepted")
