from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from ..core.settings import SchedulerSettings, load_scheduler_settings
from ..engine.load_chart import max_envelope
from ..engine.models import CraneModel, CranePlacement, LoadChart, MarkupCategory, PreviewState
from .scene import PersistenceStore, SceneRenderer, safe_add_line_groups, safe_remove_markups, safe_store_call
from .scheduler import MarkupSyncScheduler, RedrawKind
from .silhouette import build_crane_markups


async def draw_placement(
    scene: SceneRenderer,
    crane: CraneModel,
    placement: CranePlacement,
    charts: List[LoadChart],
) -> Dict[MarkupCategory, List[int]]:
    """Draw a persisted placement once (no scheduling). Returns ids per category."""
    envelope = max_envelope(charts, placement.hook_weight_kg, placement.lifting_block_kg, placement.safety_factor)
    drawn: Dict[MarkupCategory, List[int]] = {}
    for category, groups in build_crane_markups(crane, placement, envelope).items():
        ids = await safe_add_line_groups(scene, groups)
        if ids:
            drawn[category] = ids
    return drawn


async def remove_placement_markups(scene: SceneRenderer, placement: CranePlacement) -> bool:
    return await safe_remove_markups(scene, placement.all_primitive_ids())


async def delete_placement(scene: SceneRenderer, store: PersistenceStore, placement: CranePlacement) -> bool:
    if placement.id is None:
        return False
    await remove_placement_markups(scene, placement)
    ok = await safe_store_call("delete_placement", store.delete_placement(placement.id))
    return bool(ok)


async def set_placement_visible(
    scene: SceneRenderer,
    store: PersistenceStore,
    placement: CranePlacement,
    visible: bool,
) -> CranePlacement:
    """Show (draw and record ids) or hide (remove and clear ids) a saved placement."""
    if placement.id is None:
        raise ValueError("Only saved placements can be shown or hidden.")
    if visible:
        crane = await safe_store_call("get_crane_model", store.get_crane_model(placement.crane_model_id))
        if crane is None:
            return placement
        charts = await safe_store_call(
            "load_charts", store.load_charts(placement.crane_model_id, placement.counterweight_config_id)
        )
        ids = await draw_placement(scene, crane, placement, charts or [])
    else:
        await remove_placement_markups(scene, placement)
        ids = {}
    updated = placement.model_copy(update={"primitive_ids": ids})
    await safe_store_call("update_primitive_ids", store.update_primitive_ids(placement.id, ids))
    return updated


class PlacementEditSession:
    """
    One place/edit interaction for a crane.

      begin()   hide the saved drawing (if any) and start the live preview
      update()  apply field edits; the scheduler decides full vs label redraw
      cancel()  drop the preview and redraw the unmodified saved placement
      save()    drop the preview, persist, draw and record the final primitives
    """

    def __init__(
        self,
        scene: SceneRenderer,
        store: PersistenceStore,
        settings: Optional[SchedulerSettings] = None,
    ) -> None:
        self._scene = scene
        self._store = store
        self._settings = settings or load_scheduler_settings()
        self._saved: Optional[CranePlacement] = None
        self.preview: Optional[PreviewState] = None
        self.scheduler: Optional[MarkupSyncScheduler] = None

    @property
    def active(self) -> bool:
        return self.preview is not None

    def _require_preview(self) -> PreviewState:
        if self.preview is None:
            raise RuntimeError("No edit session in progress.")
        return self.preview

    async def begin(self, placement: CranePlacement) -> bool:
        if self.active:
            raise RuntimeError("Edit session already in progress.")
        crane = await safe_store_call("get_crane_model", self._store.get_crane_model(placement.crane_model_id))
        if crane is None:
            return False
        charts = await safe_store_call(
            "load_charts", self._store.load_charts(placement.crane_model_id, placement.counterweight_config_id)
        )

        self._saved = placement if placement.id is not None else None
        if self._saved is not None and self._saved.primitive_ids:
            # The live preview replaces the persisted drawing while editing.
            await remove_placement_markups(self._scene, self._saved)

        self.preview = PreviewState(placement=placement, crane=crane, charts=list(charts or []))
        self.scheduler = MarkupSyncScheduler(self._scene, self._require_preview, self._settings)
        self.scheduler.request(RedrawKind.FULL)
        logger.info(f"Edit session started ({'existing ' + str(self._saved.id) if self._saved else 'new placement'})")
        return True

    def update(self, **changes: Any) -> Optional[RedrawKind]:
        preview = self._require_preview()
        data = preview.placement.model_dump()
        data.update(changes)
        preview.placement = CranePlacement.model_validate(data)
        return self.scheduler.notify(changes.keys())

    def move(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> Optional[RedrawKind]:
        p = self._require_preview().placement
        return self.update(position_x=p.position_x + dx, position_y=p.position_y + dy, position_z=p.position_z + dz)

    def rotate(self, degrees: float) -> Optional[RedrawKind]:
        p = self._require_preview().placement
        return self.update(rotation_deg=(p.rotation_deg + degrees) % 360.0)

    async def change_crane(self, crane_model_id: str, counterweight_id: Optional[str] = None) -> bool:
        """Swap crane model and/or counterweight; reloads reference data before redrawing."""
        preview = self._require_preview()
        crane = await safe_store_call("get_crane_model", self._store.get_crane_model(crane_model_id))
        if crane is None:
            return False
        charts = await safe_store_call("load_charts", self._store.load_charts(crane_model_id, counterweight_id))
        preview.crane = crane
        preview.charts = list(charts or [])
        changes: Dict[str, Any] = {"crane_model_id": crane_model_id, "counterweight_config_id": counterweight_id}
        if crane_model_id != preview.placement.crane_model_id and crane.default_boom_length_m:
            changes["boom_length_m"] = crane.default_boom_length_m
        self.update(**changes)
        return True

    async def cancel(self) -> Optional[CranePlacement]:
        preview = self._require_preview()
        await self.scheduler.aclose()
        restored = self._saved
        if restored is not None and restored.id is not None:
            # Saved reference data may differ from the preview's if the crane was swapped.
            restored = await set_placement_visible(self._scene, self._store, restored, True)
        self._reset()
        logger.info(f"Edit session cancelled ({preview.crane.display_name})")
        return restored

    async def save(self) -> Optional[CranePlacement]:
        preview = self._require_preview()
        await self.scheduler.aclose()

        data = preview.placement.model_copy(update={"primitive_ids": {}})
        if self._saved is not None and self._saved.id is not None:
            ok = await safe_store_call("update_placement", self._store.update_placement(self._saved.id, data))
            result = data.model_copy(update={"id": self._saved.id}) if ok else None
        else:
            result = await safe_store_call("create_placement", self._store.create_placement(data))

        if result is None or result.id is None:
            logger.warning("Saving placement failed; restoring previous drawing")
            if self._saved is not None:
                await set_placement_visible(self._scene, self._store, self._saved, True)
            self._reset()
            return None

        ids = await draw_placement(self._scene, preview.crane, result, preview.charts)
        result = result.model_copy(update={"primitive_ids": ids})
        await safe_store_call("update_primitive_ids", self._store.update_primitive_ids(result.id, ids))
        self._reset()
        logger.info(f"Placement {result.id} saved with {len(result.all_primitive_ids())} primitives")
        return result

    def _reset(self) -> None:
        self.preview = None
        self.scheduler = None
        self._saved = None
