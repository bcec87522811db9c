from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from ..engine.models import RGBAColor
from .primitives import LineGroup, group_xy_m, to_mm
from .scene import confirm_removed, safe_add_line_groups, safe_remove_markups, safe_store_call


class FakeScene:
    """In-memory host scene. Ids are handed out sequentially; `live` is what is on screen."""

    def __init__(self, delay: float = 0.0) -> None:
        self.live: Dict[int, Dict[str, Any]] = {}
        self.delay = delay
        self.fail_add = False
        self.fail_remove = False
        self.in_flight = 0
        self.max_in_flight = 0
        self._next = 1

    async def add_line_groups(self, groups: List[Dict[str, Any]]) -> List[int]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.fail_add:
                raise RuntimeError("add rejected")
            ids = []
            for g in groups:
                self.live[self._next] = g
                ids.append(self._next)
                self._next += 1
            return ids
        finally:
            self.in_flight -= 1

    async def remove_markups(self, ids: List[int]) -> None:
        await asyncio.sleep(0)
        if self.fail_remove:
            raise RuntimeError("remove rejected")
        for i in ids:
            self.live.pop(i, None)


class LaggyScene(FakeScene):
    """Reports removed ids as still present for the first `lag` polls."""

    def __init__(self, lag: int) -> None:
        super().__init__()
        self.lag = lag
        self.polls = 0

    async def existing_markups(self, ids: List[int]) -> List[int]:
        self.polls += 1
        return list(ids) if self.polls <= self.lag else []


def _square() -> LineGroup:
    return group_xy_m([(0, 0), (1, 0), (1, 1), (0, 1)], 0.5, RGBAColor(r=1, g=2, b=3))


def test_metres_to_millimetres() -> None:
    assert to_mm(1.25) == 1250.0
    g = _square()
    assert len(g.segments) == 4
    assert g.segments[-1].end == g.segments[0].start
    assert g.as_host()["segments"][1]["start"] == {"positionX": 1000.0, "positionY": 0.0, "positionZ": 500.0}


def test_add_and_remove_wrappers() -> None:
    async def scenario():
        scene = FakeScene()
        ids = await safe_add_line_groups(scene, [_square(), _square()])
        assert ids == [1, 2]
        assert await safe_remove_markups(scene, ids) is True
        assert scene.live == {}

        scene.fail_add = True
        assert await safe_add_line_groups(scene, [_square()]) == []
        scene.fail_remove = True
        assert await safe_remove_markups(scene, [1]) is False
        assert await safe_remove_markups(scene, []) is True

    asyncio.run(scenario())


def test_confirm_removed_polls_until_gone() -> None:
    async def scenario():
        scene = LaggyScene(lag=2)
        assert await confirm_removed(scene, [1, 2], 5, 0.0, 0.0) is True
        assert scene.polls == 3

        stuck = LaggyScene(lag=100)
        assert await confirm_removed(stuck, [1], 3, 0.0, 0.0) is False
        assert stuck.polls == 3

        # no existing_markups(): settle delay only
        assert await confirm_removed(FakeScene(), [1], 3, 0.0, 0.0) is True

    asyncio.run(scenario())


def test_store_call_failure_is_none() -> None:
    async def boom():
        raise ConnectionError("offline")

    async def ok():
        return 42

    async def scenario():
        assert await safe_store_call("boom", boom()) is None
        assert await safe_store_call("ok", ok()) == 42

    asyncio.run(scenario())
