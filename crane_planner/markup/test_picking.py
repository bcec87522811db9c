from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List

from .picking import SELECTION_EVENT, PickedPosition, PickingSubscription, pick_position, position_from_bbox

BOX = {"min": {"x": 0.0, "y": 2.0, "z": 1.5}, "max": {"x": 4.0, "y": 6.0, "z": 9.0}}


class FakeViewer:
    def __init__(self, selection=None) -> None:
        self.selection: List[Dict[str, Any]] = selection or []
        self.listeners: Dict[str, List[Callable]] = {}

    async def get_selection(self):
        return self.selection

    async def get_object_bounding_boxes(self, model_id, runtime_ids):
        return [{"id": runtime_ids[0], "boundingBox": BOX}]

    def add_event_listener(self, event, callback) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def remove_event_listener(self, event, callback) -> None:
        self.listeners[event].remove(callback)

    def fire(self, selection) -> None:
        for cb in list(self.listeners.get(SELECTION_EVENT, [])):
            cb({"data": {"selection": {"modelObjectIds": selection}}})


SELECTED = [{"modelId": "m1", "objectRuntimeIds": [7, 8]}]


def test_bbox_centre_and_bottom() -> None:
    assert position_from_bbox(BOX) == PickedPosition(x=2.0, y=4.0, z=1.5)


def test_current_selection_used_directly() -> None:
    viewer = FakeViewer(selection=SELECTED)
    pos = asyncio.run(pick_position(viewer, timeout=0.1))
    assert pos == PickedPosition(x=2.0, y=4.0, z=1.5)
    assert viewer.listeners == {}


def test_waits_for_pick_and_unsubscribes() -> None:
    async def scenario():
        viewer = FakeViewer()
        task = asyncio.ensure_future(pick_position(viewer, timeout=1.0))
        for _ in range(10):
            if viewer.listeners.get(SELECTION_EVENT):
                break
            await asyncio.sleep(0)
        viewer.fire([])  # empty selection is ignored
        viewer.fire(SELECTED)
        pos = await task
        assert pos == PickedPosition(x=2.0, y=4.0, z=1.5)
        assert viewer.listeners[SELECTION_EVENT] == []

    asyncio.run(scenario())


def test_timeout_releases_listener() -> None:
    async def scenario():
        viewer = FakeViewer()
        assert await pick_position(viewer, timeout=0.01) is None
        assert viewer.listeners[SELECTION_EVENT] == []

    asyncio.run(scenario())


def test_subscription_outside_context_rejected() -> None:
    async def scenario():
        try:
            await PickingSubscription(FakeViewer()).wait(0.01)
        except RuntimeError:
            return
        raise AssertionError("wait() outside 'async with' accepted")

    asyncio.run(scenario())
