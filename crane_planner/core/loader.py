from __future__ import annotations
import importlib
import pkgutil
from typing import Dict, List, Optional
from loguru import logger
from .tool_base import ToolBase

TOOLS_PKG = "crane_planner.tools"

def discover_tools(category: Optional[str] = None) -> List[ToolBase]:
    """
    Plugin tools live in crane_planner.tools.<tool_id> and export `TOOL` from __init__.py.
    A broken plugin is logged and skipped so the rest of the planner still loads.
    """
    found: List[ToolBase] = []
    pkg = importlib.import_module(TOOLS_PKG)
    for info in pkgutil.iter_modules(pkg.__path__):
        if not info.ispkg:
            continue
        mod_name = f"{TOOLS_PKG}.{info.name}"
        try:
            tool = getattr(importlib.import_module(mod_name), "TOOL", None)
        except Exception as e:
            logger.exception(f"Failed loading tool {mod_name}: {e}")
            continue
        if tool is None:
            logger.warning(f"Module {mod_name} has no TOOL export; skipping.")
            continue
        if category is not None and tool.meta.category.lower() != category.lower():
            continue
        found.append(tool)
    found.sort(key=lambda t: (t.meta.category.lower(), t.meta.name.lower()))
    return found

def tools_by_id() -> Dict[str, ToolBase]:
    return {t.meta.id: t for t in discover_tools()}
