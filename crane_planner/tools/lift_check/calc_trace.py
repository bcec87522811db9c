from __future__ import annotations

import hashlib
import json
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional


@dataclass(frozen=True)
class TraceMeta:
    tool_id: str
    tool_version: str
    timestamp: str
    units_system: str
    input_hash: str
    basis: Optional[str] = None


@dataclass(frozen=True)
class TraceInput:
    id: str
    label: str
    value: Any
    units: str


@dataclass(frozen=True)
class Assumption:
    id: str
    text: str


@dataclass(frozen=True)
class CalcVar:
    symbol: str
    description: str
    value: Any
    units: str


@dataclass(frozen=True)
class CheckResult:
    label: str
    demand: float
    capacity: float
    ratio: float
    pass_fail: str


@dataclass
class CalcStep:
    id: str
    section: str
    title: str
    output_symbol: str
    equation: str
    substitution: str
    variables: List[CalcVar]
    value: float
    value_rounded: float
    units: str
    checks: List[CheckResult] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


@dataclass
class CalcTrace:
    """Reproducible record of one lift check. Every export is rendered from this object."""

    meta: TraceMeta
    inputs: List[TraceInput] = field(default_factory=list)
    assumptions: List[Assumption] = field(default_factory=list)
    steps: List[CalcStep] = field(default_factory=list)
    tables: Dict[str, Any] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        *,
        tool_id: str,
        tool_version: str,
        inputs: Dict[str, Any],
        input_hash: Optional[str] = None,
        basis: Optional[str] = None,
    ) -> "CalcTrace":
        meta = TraceMeta(
            tool_id=tool_id,
            tool_version=tool_version,
            timestamp=datetime.now().isoformat(timespec="seconds"),
            units_system="SI",
            input_hash=input_hash or compute_input_hash(inputs),
            basis=basis,
        )
        listed = [
            TraceInput(id=k, label=k.replace("_", " "), value=inputs[k], units=infer_units(k))
            for k in sorted(inputs)
            if not isinstance(inputs[k], (list, dict))
        ]
        return cls(meta=meta, inputs=listed)

    def step(self, step_id: str) -> CalcStep:
        for s in self.steps:
            if s.id == step_id:
                return s
        raise KeyError(step_id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def infer_units(key: str) -> str:
    for suffix, units in (("_m", "m"), ("_kg", "kg"), ("_deg", "deg"), ("_pct", "%"), ("_mm", "mm")):
        if key.endswith(suffix):
            return units
    return "-"


def compute_input_hash(inputs: Dict[str, Any]) -> str:
    """Deterministic hash of normalized, key-sorted inputs."""
    norm: Dict[str, Any] = {}
    for k in sorted(inputs):
        v = inputs[k]
        norm[k] = float(f"{v:.12g}") if isinstance(v, float) else v
    payload = json.dumps(norm, sort_keys=True, separators=(",", ":"), ensure_ascii=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]


def compute_step(
    trace: CalcTrace,
    *,
    id: str,
    section: str,
    title: str,
    output_symbol: str,
    equation: str,
    variables: List[Dict[str, Any]],
    compute_fn: Callable[[], float],
    units: str,
    decimals: int = 3,
    checks_builder: Optional[Callable[[float], List[Dict[str, Any]]]] = None,
) -> float:
    """Evaluate one step, append it to the trace and return the unrounded value."""
    if not id or not section or not title:
        raise ValueError("compute_step requires non-empty id/section/title.")

    var_objs: List[CalcVar] = []
    for v in variables:
        missing = [k for k in ("symbol", "description", "value", "units") if k not in v]
        if missing:
            raise ValueError(f"Variable in step {id} missing {missing}.")
        var_objs.append(CalcVar(symbol=str(v["symbol"]), description=str(v["description"]), value=v["value"], units=str(v["units"])))

    value = float(compute_fn())

    lhs, eq, rhs = equation.partition("=")
    if not eq:
        lhs, rhs = "", equation
    for v in var_objs:
        shown = f"{v.value:g}" if isinstance(v.value, (int, float)) else str(v.value)
        # whole symbols only: "W" must not match inside "W_h"
        rhs = re.sub(rf"(?<!\w){re.escape(v.symbol)}(?!\w)", lambda _m, s=shown: s, rhs)
    substitution = f"{lhs}{eq}{rhs}"

    checks = [
        CheckResult(
            label=str(c["label"]),
            demand=float(c["demand"]),
            capacity=float(c["capacity"]),
            ratio=float(c["ratio"]),
            pass_fail=str(c["pass_fail"]),
        )
        for c in (checks_builder(value) if checks_builder else [])
    ]

    trace.steps.append(
        CalcStep(
            id=id,
            section=section,
            title=title,
            output_symbol=output_symbol,
            equation=equation,
            substitution=substitution,
            variables=var_objs,
            value=value,
            value_rounded=round(value, decimals),
            units=units,
            checks=checks,
        )
    )
    return value
