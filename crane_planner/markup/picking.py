from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Set

from loguru import logger

SELECTION_EVENT = "onSelectionChanged"


@dataclass(frozen=True)
class PickedPosition:
    """Crane base position picked from a model object (metres)."""

    x: float
    y: float
    z: float


class SelectionViewer(Protocol):
    async def get_selection(self) -> List[Dict[str, Any]]:
        ...

    async def get_object_bounding_boxes(self, model_id: str, runtime_ids: List[int]) -> List[Dict[str, Any]]:
        ...

    def add_event_listener(self, event: str, callback: Callable[[Dict[str, Any]], None]) -> None:
        ...

    def remove_event_listener(self, event: str, callback: Callable[[Dict[str, Any]], None]) -> None:
        ...


def position_from_bbox(bbox: Dict[str, Any]) -> PickedPosition:
    """Centre of the box in plan, bottom face for elevation."""
    lo, hi = bbox["min"], bbox["max"]
    return PickedPosition(
        x=(float(lo["x"]) + float(hi["x"])) / 2.0,
        y=(float(lo["y"]) + float(hi["y"])) / 2.0,
        z=float(lo["z"]),
    )


async def resolve_selection(viewer: SelectionViewer, selection: List[Dict[str, Any]]) -> Optional[PickedPosition]:
    if not selection:
        return None
    first = selection[0]
    runtime_ids = first.get("objectRuntimeIds") or []
    if not runtime_ids:
        return None
    boxes = await viewer.get_object_bounding_boxes(first["modelId"], [runtime_ids[0]])
    if not boxes or not boxes[0].get("boundingBox"):
        return None
    return position_from_bbox(boxes[0]["boundingBox"])


class PickingSubscription:
    """
    Selection listener whose lifetime is the `async with` block.

    The listener is registered on enter and removed on exit, whether the pick
    completed, timed out or was cancelled.
    """

    def __init__(self, viewer: SelectionViewer) -> None:
        self._viewer = viewer
        self._result: Optional[asyncio.Future] = None
        self._tasks: Set[asyncio.Task] = set()
        self._registered = False

    async def __aenter__(self) -> "PickingSubscription":
        self._result = asyncio.get_running_loop().create_future()
        self._viewer.add_event_listener(SELECTION_EVENT, self._on_selection)
        self._registered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()

    def release(self) -> None:
        if self._registered:
            self._viewer.remove_event_listener(SELECTION_EVENT, self._on_selection)
            self._registered = False
        for t in list(self._tasks):
            t.cancel()
        if self._result is not None and not self._result.done():
            self._result.cancel()

    @property
    def active(self) -> bool:
        return self._registered

    def _on_selection(self, event: Dict[str, Any]) -> None:
        selection = ((event or {}).get("data") or {}).get("selection", {}).get("modelObjectIds") or []
        if not selection or self._result is None or self._result.done():
            return
        task = asyncio.get_running_loop().create_task(self._resolve(selection))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _resolve(self, selection: List[Dict[str, Any]]) -> None:
        try:
            pos = await resolve_selection(self._viewer, selection)
        except Exception as e:
            logger.exception(f"Failed to resolve picked object position: {e}")
            return
        if pos is not None and self._result is not None and not self._result.done():
            self._result.set_result(pos)

    async def wait(self, timeout: Optional[float] = None) -> Optional[PickedPosition]:
        if self._result is None:
            raise RuntimeError("PickingSubscription used outside 'async with'.")
        try:
            return await asyncio.wait_for(asyncio.shield(self._result), timeout)
        except asyncio.TimeoutError:
            return None


async def pick_position(viewer: SelectionViewer, timeout: Optional[float] = None) -> Optional[PickedPosition]:
    """Use the current selection if there is one, otherwise wait for the user to pick an object."""
    try:
        current = await viewer.get_selection()
        pos = await resolve_selection(viewer, current or [])
    except Exception as e:
        logger.exception(f"Reading current selection failed: {e}")
        pos = None
    if pos is not None:
        return pos
    async with PickingSubscription(viewer) as sub:
        return await sub.wait(timeout)
