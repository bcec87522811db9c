from __future__ import annotations

import hashlib
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from ...core.paths import runs_dir

TOOL_ID = "lift_check"


def create_run_dir(tool_id: str = TOOL_ID, input_hash: Optional[str] = None) -> Path:
    """
    New run package directory: <user data>/<tool_id>/runs/YYYYMMDD_HHMMSS_<short>/

    The suffix mixes the input hash with a per-call seed so two runs of the same
    inputs in the same second still get separate folders.
    """
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    seed = f"{ts}:{os.getpid()}:{time.time_ns()}"
    rand = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:8]
    short = f"{input_hash[:6]}{rand[:2]}" if input_hash else rand

    run_dir = runs_dir(tool_id) / f"{ts}_{short}"
    run_dir.mkdir(parents=True, exist_ok=False)
    return run_dir
