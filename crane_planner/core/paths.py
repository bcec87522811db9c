from __future__ import annotations
import os
from pathlib import Path

APP_NAME = "CranePlanner"

def user_data_dir() -> Path:
    """
    Writable location for logs, settings and run packages.
    Windows default: %LOCALAPPDATA%\\CranePlanner\\
    CRANE_PLANNER_HOME overrides the root (used by CI and tests).
    """
    base = (
        os.environ.get("CRANE_PLANNER_HOME")
        or os.environ.get("LOCALAPPDATA")
        or os.environ.get("APPDATA")
        or str(Path.home())
    )
    p = Path(base) / APP_NAME
    p.mkdir(parents=True, exist_ok=True)
    return p

def logs_dir() -> Path:
    p = user_data_dir() / "logs"
    p.mkdir(parents=True, exist_ok=True)
    return p

def runs_dir(tool_id: str) -> Path:
    p = user_data_dir() / tool_id / "runs"
    p.mkdir(parents=True, exist_ok=True)
    return p

def settings_path() -> Path:
    return user_data_dir() / "settings.json"
