from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from .calc_trace import CalcTrace


def _autosize(ws) -> None:
    for col in ws.columns:
        width = max((len(str(c.value)) for c in col if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(col[0].column)].width = min(80, max(10, width + 2))


def _header(ws, names) -> None:
    ws.append(list(names))
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)


def _cell(v: Any) -> Any:
    return json.dumps(v, ensure_ascii=True) if isinstance(v, (dict, list)) else v


def export_json(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    p1 = out_dir / "calc_trace.json"
    p1.write_text(json.dumps(trace.to_dict(), indent=2, ensure_ascii=True, default=str), encoding="utf-8")
    p2 = out_dir / "results.json"
    p2.write_text(json.dumps(results, indent=2, ensure_ascii=True, default=str), encoding="utf-8")
    return {"calc_trace": p1, "results": p2}


def export_excel(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Path:
    wb = Workbook()

    ws = wb.active
    ws.title = "Inputs"
    _header(ws, ["id", "label", "value", "units"])
    for i in trace.inputs:
        ws.append([i.id, i.label, _cell(i.value), i.units])
    _autosize(ws)

    ws = wb.create_sheet("Assumptions")
    _header(ws, ["id", "text"])
    for a in trace.assumptions:
        ws.append([a.id, a.text])
    _autosize(ws)

    ws = wb.create_sheet("Calcs")
    _header(ws, ["id", "section", "title", "equation", "substitution", "result", "units", "checks"])
    for s in trace.steps:
        checks = "; ".join(f"{c.label}: {c.pass_fail}" for c in s.checks)
        ws.append([s.id, s.section, s.title, s.equation, s.substitution, s.value_rounded, s.units, checks])
    _autosize(ws)

    rows = trace.tables.get("load_capacities") or []
    ws = wb.create_sheet("Load chart")
    _header(ws, ["radius_m", "max_capacity_kg", "available_capacity_kg", "is_safe"])
    for r in rows:
        ws.append([r["radius_m"], r["max_capacity_kg"], r["available_capacity_kg"], r["is_safe"]])
    _autosize(ws)

    ws = wb.create_sheet("Results")
    _header(ws, ["key", "value"])
    for k, v in results.items():
        ws.append([k, _cell(v)])
    _autosize(ws)

    p = out_dir / "results.xlsx"
    wb.save(p)
    return p


def export_pdf(trace: CalcTrace, out_dir: Path) -> Path:
    """One-page summary: meta, step results and key outputs. Full detail is in the workbook."""
    p = out_dir / "report.pdf"
    c = canvas.Canvas(str(p), pagesize=A4)
    w, h = A4
    y = h - 60

    def line(text: str, font: str = "Helvetica", size: int = 9, indent: float = 60, gap: float = 12) -> None:
        nonlocal y
        if y < 60:
            c.showPage()
            y = h - 60
        c.setFont(font, size)
        c.drawString(indent, y, text)
        y -= gap

    line("Crane Lift Check - Calculation Summary", "Helvetica-Bold", 14, gap=22)
    line(f"Tool: {trace.meta.tool_id} v{trace.meta.tool_version}", size=10)
    line(f"Input hash: {trace.meta.input_hash}", size=10)
    line(f"Generated: {trace.meta.timestamp}", size=10, gap=20)

    line("Calculation steps:", "Helvetica-Bold", 10, gap=14)
    for s in trace.steps:
        line(f"{s.id}  {s.title}: {s.output_symbol} = {s.value_rounded:g} {s.units}", indent=72)
        line(s.substitution, size=8, indent=90, gap=11)
        for chk in s.checks:
            line(f"{chk.label}: {chk.pass_fail}", size=8, indent=90, gap=11)

    y -= 8
    line("Key outputs:", "Helvetica-Bold", 10, gap=14)
    for k, v in (trace.summary or {}).items():
        line(f"{k}: {v}", indent=72)

    c.showPage()
    c.save()
    return p


def export_all(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    outputs: Dict[str, Path] = {}
    outputs.update(export_json(trace, out_dir, results))
    outputs["excel"] = export_excel(trace, out_dir, results)
    outputs["pdf"] = export_pdf(trace, out_dir)
    return outputs
