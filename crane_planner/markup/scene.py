"""
Host collaborators and the best-effort wrappers the engine calls them through.

Every host call can fail. Failures are logged and turned into an empty result;
nothing here retries and nothing here raises into the caller.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Dict, List, Optional, Protocol, Sequence, TypeVar, runtime_checkable

from loguru import logger

from ..engine.models import CraneModel, CranePlacement, LoadChart, MarkupCategory
from .primitives import LineGroup, batch_payload

T = TypeVar("T")


class SceneRenderer(Protocol):
    """Host 3D viewer. Coordinates are millimetres."""

    async def add_line_groups(self, groups: List[Dict[str, Any]]) -> List[int]:
        ...

    async def remove_markups(self, ids: List[int]) -> None:
        ...


@runtime_checkable
class RemovalAwareScene(Protocol):
    """Optional capability: report which of the given ids still exist in the scene."""

    async def existing_markups(self, ids: List[int]) -> List[int]:
        ...


class PersistenceStore(Protocol):
    async def get_crane_model(self, crane_model_id: str) -> CraneModel:
        ...

    async def load_charts(self, crane_model_id: str, counterweight_id: Optional[str]) -> List[LoadChart]:
        ...

    async def create_placement(self, placement: CranePlacement) -> CranePlacement:
        ...

    async def update_placement(self, placement_id: str, placement: CranePlacement) -> bool:
        ...

    async def delete_placement(self, placement_id: str) -> bool:
        ...

    async def update_primitive_ids(self, placement_id: str, ids: Dict[MarkupCategory, List[int]]) -> bool:
        ...


async def safe_add_line_groups(scene: SceneRenderer, groups: Sequence[LineGroup]) -> List[int]:
    """Submit groups in one host call. Returns the new ids, or [] on failure."""
    if not groups:
        return []
    try:
        ids = await scene.add_line_groups(batch_payload(groups))
    except Exception as e:
        logger.exception(f"add_line_groups failed for {len(groups)} groups: {e}")
        return []
    return [int(i) for i in (ids or [])]


async def safe_remove_markups(scene: SceneRenderer, ids: Sequence[int]) -> bool:
    if not ids:
        return True
    try:
        await scene.remove_markups(list(ids))
    except Exception as e:
        logger.exception(f"remove_markups failed for {len(ids)} ids: {e}")
        return False
    return True


async def confirm_removed(
    scene: SceneRenderer,
    ids: Sequence[int],
    attempts: int,
    interval_s: float,
    settle_delay_s: float,
) -> bool:
    """
    Wait until the host no longer reports `ids`.

    Scenes that can answer existing_markups() are polled up to `attempts` times.
    Others get a fixed settle delay.
    """
    if not ids:
        return True
    if not isinstance(scene, RemovalAwareScene):
        await asyncio.sleep(settle_delay_s)
        return True
    for attempt in range(max(1, attempts)):
        try:
            remaining = await scene.existing_markups(list(ids))
        except Exception as e:
            logger.warning(f"existing_markups failed, falling back to settle delay: {e}")
            await asyncio.sleep(settle_delay_s)
            return True
        if not remaining:
            return True
        logger.debug(f"{len(remaining)} markups still present after removal (poll {attempt + 1}/{attempts})")
        await asyncio.sleep(interval_s)
    logger.warning(f"Host did not confirm removal of {len(ids)} markups")
    return False


async def safe_store_call(label: str, call: Awaitable[T]) -> Optional[T]:
    """Await a persistence call; None on failure."""
    try:
        return await call
    except Exception as e:
        logger.exception(f"{label} failed: {e}")
        return None
