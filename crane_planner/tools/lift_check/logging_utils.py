from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Tuple

from loguru import logger


def get_run_logger(run_dir: Path, tool_id: str, input_hash: Optional[str] = None) -> Tuple[Any, int]:
    """
    Logger bound to one run, plus a sink writing only that run's records to <run_dir>/run.log.

    The application-level sinks (core.logging) still receive everything.
    Returns (bound_logger, sink_id); pass sink_id to remove_run_logger_sink().
    """
    run_dir.mkdir(parents=True, exist_ok=True)
    run_key = str(run_dir)
    bound = logger.bind(tool_id=tool_id, run_dir=run_key, input_hash=input_hash or "")
    sink_id = logger.add(
        str(run_dir / "run.log"),
        level="DEBUG",
        backtrace=True,
        diagnose=False,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {extra[tool_id]} | {message}",
        filter=lambda r: r["extra"].get("run_dir") == run_key,
    )
    return bound, sink_id


def remove_run_logger_sink(sink_id: Optional[int]) -> None:
    if sink_id is None:
        return
    try:
        logger.remove(sink_id)
    except ValueError:
        # already removed (e.g. the host reconfigured logging mid-run)
        logger.debug(f"Run log sink {sink_id} was already removed")
