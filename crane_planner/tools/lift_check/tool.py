from __future__ import annotations

import traceback
from typing import Any, Dict

from ...core.tool_base import ToolMeta
from .calc_trace import Assumption, CalcTrace, compute_input_hash
from .evaluation import evaluate_lift_traced, result_rows
from .exports import export_all
from .logging_utils import get_run_logger, remove_run_logger_sink
from .models import LiftCheckInputs
from .paths import TOOL_ID, create_run_dir


class LiftCheckTool:
    """Single-pick lift check: reach, chain length and chart capacity, with a calc package export."""

    meta = ToolMeta(
        id=TOOL_ID,
        name="Crane Lift Check",
        category="Cranes",
        version="1.0.0",
        description="Boom geometry and load chart capacity for one crane position and one target, with JSON/XLSX/PDF exports.",
    )

    InputModel = LiftCheckInputs

    def default_inputs(self) -> dict:
        return self.InputModel().model_dump()

    def run_batch(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        """Validate, evaluate and export. Invalid inputs raise ValidationError; later failures come back as ok=False."""
        model = self.InputModel.model_validate(inputs)
        inputs_norm = model.model_dump()
        input_hash = compute_input_hash(inputs_norm)
        run_dir = create_run_dir(self.meta.id, input_hash)
        log, sink_id = get_run_logger(run_dir, self.meta.id, input_hash)

        try:
            log.info("Starting lift check batch run")
            log.info(f"Inputs (validated): {inputs_norm}")

            trace = CalcTrace.new(
                tool_id=self.meta.id,
                tool_version=self.meta.version,
                inputs=inputs_norm,
                input_hash=input_hash,
                basis="Manufacturer load chart, linear interpolation between listed radii",
            )
            trace.assumptions.extend(
                [
                    Assumption(id="A1", text="Single rigid boom pivoting at a fixed height above the crane base."),
                    Assumption(
                        id="A2",
                        text="Chart capacity is interpolated linearly between listed radii and held constant beyond the first/last point.",
                    ),
                    Assumption(
                        id="A3",
                        text="Usable capacity at the hook divides the chart capacity by the safety factor before deducting hook and block weight.",
                    ),
                    Assumption(
                        id="A4",
                        text="Chart tables deduct hook and block weight before dividing by the safety factor.",
                    ),
                ]
            )

            res = evaluate_lift_traced(trace, model)
            log.info(f"Lift status: {res.status.value} at d={res.horizontal_dist_m:.3f} m")

            results: Dict[str, Any] = {
                "ok": True,
                "run_dir": str(run_dir),
                "input_hash": trace.meta.input_hash,
            }
            results.update({row["key"]: row["value"] for row in result_rows(res)})
            trace.summary.update({k: v for k, v in results.items() if k not in ("ok", "run_dir")})

            out_paths = export_all(trace, run_dir, results)
            results["outputs"] = {k: str(v) for k, v in out_paths.items()}

            log.info("Batch run complete")
            return results

        except Exception as e:
            log.exception("Batch run failed")
            return {
                "ok": False,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "error": str(e),
                "traceback": traceback.format_exc(),
            }

        finally:
            remove_run_logger_sink(sink_id)


TOOL = LiftCheckTool()
