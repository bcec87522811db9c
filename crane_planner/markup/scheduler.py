"""
Live preview redraw scheduling.

Edits are classified FULL (geometry) or LABEL_ONLY (text), debounced per kind,
and handed to a single worker task that runs one redraw at a time. Requests
that arrive mid-redraw are folded into one pending kind (upgraded, never
downgraded) and executed against the configuration current at that point.

States:
  IDLE                  no worker
  RUNNING               worker executing, nothing queued
  RUNNING_WITH_PENDING  worker executing, one kind queued
  CLOSED                stopped; only the final cleanup may still be running
"""
from __future__ import annotations

import asyncio
from enum import Enum, IntEnum
from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from ..core.settings import SchedulerSettings
from ..engine.load_chart import max_envelope
from ..engine.models import MarkupCategory, PreviewState
from .scene import SceneRenderer, confirm_removed, safe_add_line_groups, safe_remove_markups
from .silhouette import build_crane_markups, build_position_label


class RedrawKind(IntEnum):
    # Ordered by priority; a queued kind is only ever replaced by a higher one.
    LABEL_ONLY = 1
    FULL = 2
    CLEANUP = 3


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    RUNNING_WITH_PENDING = "running_with_pending"
    CLOSED = "closed"


FULL_FIELDS = frozenset(
    {
        "crane_model_id",
        "counterweight_config_id",
        "position_x",
        "position_y",
        "position_z",
        "rotation_deg",
        "boom_length_m",
        "hook_weight_kg",
        "lifting_block_kg",
        "safety_factor",
        "show_radius_rings",
        "radius_step_m",
        "max_radius_limit_m",
        "show_radius_labels",
        "show_capacity_labels",
        "crane_color",
        "radius_color",
    }
)
LABEL_FIELDS = frozenset({"label_text", "label_height_m", "label_color"})


def classify_change(fields: Iterable[str]) -> Optional[RedrawKind]:
    """FULL if any geometry field changed, LABEL_ONLY for label fields, None otherwise."""
    names = set(fields)
    if names & FULL_FIELDS:
        return RedrawKind.FULL
    if names & LABEL_FIELDS:
        return RedrawKind.LABEL_ONLY
    return None


class MarkupSyncScheduler:
    def __init__(
        self,
        scene: SceneRenderer,
        state_provider: Callable[[], PreviewState],
        settings: Optional[SchedulerSettings] = None,
    ) -> None:
        self._scene = scene
        self._state_provider = state_provider
        self._settings = settings or SchedulerSettings()

        self._timers: Dict[RedrawKind, asyncio.TimerHandle] = {}
        self._pending: Optional[RedrawKind] = None
        self._worker: Optional[asyncio.Task] = None
        self._closed = False

        self._groups: Dict[MarkupCategory, List[int]] = {}
        self._stale: List[int] = []  # ids whose removal failed; retried on the next removal
        self.executed: List[RedrawKind] = []

    # ------------------------------
    # Introspection
    # ------------------------------
    @property
    def state(self) -> SchedulerState:
        if self._closed and self._worker is None:
            return SchedulerState.CLOSED
        if self._worker is None:
            return SchedulerState.IDLE
        if self._pending is None:
            return SchedulerState.RUNNING
        return SchedulerState.RUNNING_WITH_PENDING

    @property
    def settings(self) -> SchedulerSettings:
        return self._settings

    @property
    def pending(self) -> Optional[RedrawKind]:
        return self._pending

    @property
    def tracked_ids(self) -> Dict[MarkupCategory, List[int]]:
        return {k: list(v) for k, v in self._groups.items()}

    @property
    def stale_ids(self) -> List[int]:
        return list(self._stale)

    def is_debouncing(self, kind: RedrawKind) -> bool:
        return kind in self._timers

    # ------------------------------
    # Inputs
    # ------------------------------
    def notify(self, fields: Iterable[str]) -> Optional[RedrawKind]:
        """Classify a configuration change and debounce it. Returns the kind scheduled."""
        kind = classify_change(fields)
        if kind is not None:
            self.schedule(kind)
        return kind

    def schedule(self, kind: RedrawKind) -> None:
        if self._closed:
            return
        if kind == RedrawKind.LABEL_ONLY and self._full_outstanding():
            logger.debug("Label redraw dropped: full redraw outstanding")
            return
        if kind == RedrawKind.FULL:
            self._cancel_timer(RedrawKind.LABEL_ONLY)
        self._cancel_timer(kind)
        delay = self._settings.full_debounce_s if kind == RedrawKind.FULL else self._settings.label_debounce_s
        loop = asyncio.get_running_loop()
        self._timers[kind] = loop.call_later(delay, self._debounce_fired, kind)

    def request(self, kind: RedrawKind) -> None:
        """Run a redraw now, or queue it behind the one in flight."""
        if self._closed:
            return
        if kind == RedrawKind.LABEL_ONLY and self._full_outstanding():
            logger.debug("Label redraw dropped: full redraw outstanding")
            return
        if self._worker is None:
            self._worker = asyncio.get_running_loop().create_task(self._drain(kind))
            return
        self._pending = kind if self._pending is None else max(self._pending, kind)
        logger.debug(f"Redraw in flight; pending={self._pending.name}")

    def stop(self) -> asyncio.Task:
        """
        Stop scheduling and remove every preview primitive.

        Timers are cancelled immediately. If a redraw is in flight the cleanup is
        queued behind it with top priority, otherwise it starts now. The returned
        task completes once the cleanup ran.
        """
        self._closed = True
        for kind in list(self._timers):
            self._cancel_timer(kind)
        if self._worker is not None:
            self._pending = RedrawKind.CLEANUP
            return self._worker
        self._worker = asyncio.get_running_loop().create_task(self._drain(RedrawKind.CLEANUP))
        return self._worker

    async def aclose(self) -> None:
        await self.stop()

    async def wait_idle(self) -> None:
        """Block until no timer is armed and no redraw is running."""
        while True:
            if self._worker is not None:
                await asyncio.shield(self._worker)
            elif self._timers:
                await asyncio.sleep(min(self._settings.label_debounce_s, self._settings.full_debounce_s) or 0.001)
            else:
                return

    # ------------------------------
    # Internals
    # ------------------------------
    def _full_outstanding(self) -> bool:
        return RedrawKind.FULL in self._timers or self._pending == RedrawKind.FULL

    def _cancel_timer(self, kind: RedrawKind) -> None:
        handle = self._timers.pop(kind, None)
        if handle is not None:
            handle.cancel()

    def _debounce_fired(self, kind: RedrawKind) -> None:
        self._timers.pop(kind, None)
        self.request(kind)

    async def _drain(self, first: RedrawKind) -> None:
        kind: Optional[RedrawKind] = first
        try:
            while kind is not None:
                try:
                    await self._execute(kind)
                except Exception as e:
                    logger.exception(f"{kind.name} redraw failed: {e}")
                if kind == RedrawKind.CLEANUP:
                    self._pending = None
                    break
                kind, self._pending = self._pending, None
        finally:
            self._worker = None

    async def _execute(self, kind: RedrawKind) -> None:
        self.executed.append(kind)
        logger.debug(f"Executing {kind.name} redraw")
        if kind == RedrawKind.CLEANUP:
            await self._cleanup()
            return
        # Configuration is read at execution time, never from when the request was queued.
        state = self._state_provider()
        if kind == RedrawKind.FULL:
            await self._full_redraw(state)
        else:
            await self._label_redraw(state)

    async def _remove(self, ids: List[int]) -> bool:
        if not ids:
            return True
        if not await safe_remove_markups(self._scene, ids):
            self._stale = sorted(set(self._stale) | set(ids))
            return False
        removed = set(ids)
        self._stale = [i for i in self._stale if i not in removed]
        s = self._settings
        await confirm_removed(self._scene, ids, s.removal_verify_attempts, s.removal_verify_interval_s, s.settle_delay_s)
        return True

    async def _full_redraw(self, state: PreviewState) -> None:
        old = [i for ids in self._groups.values() for i in ids] + self._stale
        await self._remove(old)
        # Tracking is reset either way; failed ids stay in the stale bucket for the next removal.
        self._groups = {}

        p = state.placement
        envelope = max_envelope(state.charts, p.hook_weight_kg, p.lifting_block_kg, p.safety_factor)
        markups = build_crane_markups(state.crane, p, envelope)

        fresh: Dict[MarkupCategory, List[int]] = {}
        for category, groups in markups.items():
            ids = await safe_add_line_groups(self._scene, groups)
            if ids:
                fresh[category] = ids
        self._groups = fresh

    async def _label_redraw(self, state: PreviewState) -> None:
        old = self._groups.pop(MarkupCategory.POSITION_LABEL, [])
        await self._remove(old)
        ids = await safe_add_line_groups(self._scene, build_position_label(state.crane, state.placement))
        if ids:
            self._groups[MarkupCategory.POSITION_LABEL] = ids

    async def _cleanup(self) -> None:
        ids = [i for v in self._groups.values() for i in v] + self._stale
        self._groups = {}
        if ids and not await safe_remove_markups(self._scene, ids):
            self._stale = sorted(set(ids))
            logger.warning(f"Cleanup could not remove {len(ids)} preview markups")
            return
        self._stale = []
