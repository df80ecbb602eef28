from __future__ import annotations

import logging
import math
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Callable, Sequence

from ..config import DEFAULT_GALLERY_CONFIG, GalleryConfig
from ..core.models import Artifact
from .annotation import AnnotationLayer, Stroke, StrokeSubscription, encode_stroke_points
from .camera import CameraController, InputState
from .picking import DragState, pick
from .projection import Camera, Viewport
from .scene import EMPTY_RESULT, RenderResult, SceneRenderer
from .surface import PillowSurface, Surface

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class StrokeSubmission:
    session_id: int
    stroke: Stroke

    @property
    def stroke_data(self) -> str:
        return encode_stroke_points(self.stroke.points)


@dataclass(frozen=True)
class ArtifactPlacement:
    artifact_id: int
    position: Vec3
    rotation: Vec3
    scale: float


class GalleryListener:
    """Outbound gallery events. Subclass and override what you need."""

    def artifact_selected(self, artifact_id: int) -> None:
        pass

    def ar_mode_changed(self, artifact_id: int, active: bool) -> None:
        pass

    def back_to_gallery(self) -> None:
        pass

    def notify(self, message: str) -> None:
        pass


@dataclass
class _PendingSelection:
    artifact_id: int
    ticks: int = 0


class GalleryView:
    """Interactive gallery: camera, renderer, picking and annotation in one place.

    Everything here runs on the caller's thread. Two clocks drive it:
    `tick()` at the fixed camera rate and `render()` once per frame. They are not
    coordinated; a render simply uses whatever camera pose is current.

    Persistence goes through `save_stroke` / `save_placement`, which run on an
    executor. Their results are collected on the next `tick()`; a failure is
    reported via `listener.notify` and local state is kept as is.
    """

    def __init__(
        self,
        *,
        listener: GalleryListener | None = None,
        config: GalleryConfig = DEFAULT_GALLERY_CONFIG,
        renderer: SceneRenderer | None = None,
        controller: CameraController | None = None,
        save_stroke: Callable[[StrokeSubmission], Any] | None = None,
        save_placement: Callable[[ArtifactPlacement], Any] | None = None,
        executor: Executor | None = None,
        portfolio_title: str = "",
    ) -> None:
        self._config = config
        self._listener = listener or GalleryListener()
        self._renderer = renderer or SceneRenderer(config=config)
        self._controller = controller or CameraController(config=config)
        self._save_stroke = save_stroke
        self._save_placement = save_placement
        self._executor = executor
        self._owns_executor = False
        self.portfolio_title = portfolio_title

        self._artifacts: list[Artifact] = []
        self._inputs = InputState()
        self._drag = DragState()
        self._annotation = AnnotationLayer()
        self._viewport = Viewport(width=0.0, height=0.0)
        self._last_result: RenderResult = EMPTY_RESULT

        self._selected_id: int | None = None
        self._pending_selection: _PendingSelection | None = None
        self._ar_artifact_id: int | None = None

        self._drawing_mode = False
        self._stroke_color = config.stroke_color
        self._stroke_width = config.stroke_width
        self._session_id: int | None = None
        self._subscription: StrokeSubscription | None = None

        self._saves: list[tuple[str, Any, Future[Any]]] = []

    # ---- state ----

    @property
    def camera(self) -> Camera:
        return self._controller.camera

    @property
    def controller(self) -> CameraController:
        return self._controller

    @property
    def artifacts(self) -> tuple[Artifact, ...]:
        return tuple(self._artifacts)

    @property
    def selected_id(self) -> int | None:
        return self._selected_id

    @property
    def ar_artifact_id(self) -> int | None:
        return self._ar_artifact_id

    @property
    def in_ar_mode(self) -> bool:
        return self._ar_artifact_id is not None

    @property
    def drawing_mode(self) -> bool:
        return self._drawing_mode

    @property
    def annotation(self) -> AnnotationLayer:
        return self._annotation

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def last_result(self) -> RenderResult:
        return self._last_result

    @property
    def pending_saves(self) -> int:
        return len(self._saves)

    def _find(self, artifact_id: int) -> Artifact | None:
        for a in self._artifacts:
            if a.id == artifact_id:
                return a
        return None

    # ---- data inputs ----

    def set_artifacts(self, artifacts: Sequence[Artifact]) -> None:
        self._artifacts = list(artifacts)
        # Regions from the previous pass may point at artifacts that are gone.
        self._last_result = EMPTY_RESULT
        if self._selected_id is not None and self._find(self._selected_id) is None:
            self._selected_id = None
        if self._ar_artifact_id is not None and self._find(self._ar_artifact_id) is None:
            self.exit_ar_mode()

    def set_strokes(self, strokes: Sequence[Stroke]) -> bool:
        """Apply a remote stroke snapshot. Returns False if dropped because a stroke is in progress."""

        return self._annotation.replace_remote(strokes)

    def set_collaboration(self, session_id: int | None, subscription: StrokeSubscription | None = None) -> None:
        """Enter (or leave, with None) a collaboration session.

        Any previous subscription is cancelled. Leaving also ends drawing mode.
        """

        if self._subscription is not None:
            self._subscription.cancel()
        if self._annotation.is_drawing and session_id != self._session_id:
            # Submit the in-progress stroke against the session it was drawn in.
            self._finish_stroke()
        self._session_id = session_id
        self._subscription = subscription if session_id is not None else None
        if session_id is None:
            self.set_drawing_mode(False)

    def set_drawing_mode(self, enabled: bool, *, color: str | None = None, width: float | None = None) -> None:
        if color is not None:
            self._stroke_color = color
        if width is not None:
            self._stroke_width = float(width)
        if not enabled and self._annotation.is_drawing:
            self._finish_stroke()
        self._drawing_mode = bool(enabled)

    def resize(self, width: float, height: float) -> None:
        self._viewport = Viewport(width=max(0.0, float(width)), height=max(0.0, float(height)))

    # ---- keyboard ----

    def key_down(self, key: str) -> None:
        self._inputs = self._inputs.pressed(key)

    def key_up(self, key: str) -> None:
        self._inputs = self._inputs.released(key)

    # ---- pointer ----

    def pointer_down(self, x: float, y: float) -> int | None:
        """Handle a press. Returns the picked artifact id, if any."""

        if self._drawing_mode:
            if self._session_id is not None:
                self._annotation.begin(x, y, color=self._stroke_color, width=self._stroke_width)
            return None

        hit = pick(self._last_result.regions, x, y)
        if hit is None:
            self._drag.start(x, y)
            return None

        self._select(hit)
        return hit

    def pointer_move(self, x: float, y: float) -> None:
        if self._annotation.is_drawing:
            self._annotation.extend(x, y)
            return
        delta = self._drag.move(x, y)
        if delta is not None and not self.in_ar_mode:
            self._controller.drag(*delta)

    def pointer_up(self, x: float | None = None, y: float | None = None) -> Stroke | None:
        self._drag.stop()
        if self._annotation.is_drawing:
            return self._finish_stroke()
        return None

    # ---- selection / modes ----

    def _select(self, artifact_id: int) -> None:
        # A pick that has not been announced yet is announced now so every pick is
        # delivered exactly once.
        self._flush_pending_selection()
        self._selected_id = artifact_id
        artifact = self._find(artifact_id)
        if artifact is not None:
            self._controller.focus(artifact.position)
        self._pending_selection = _PendingSelection(artifact_id=artifact_id)

    def _flush_pending_selection(self) -> None:
        pending = self._pending_selection
        self._pending_selection = None
        if pending is not None:
            self._listener.artifact_selected(pending.artifact_id)

    def select_artifact(self, artifact_id: int) -> None:
        if self._find(artifact_id) is None:
            raise KeyError(f"Unknown artifact id: {artifact_id}")
        self._select(artifact_id)

    def enter_ar_mode(self, artifact_id: int) -> bool:
        artifact = self._find(artifact_id)
        if artifact is None or not artifact.ar_enabled:
            self._listener.notify("AR mode is not available for this artifact")
            return False
        if self._ar_artifact_id == artifact_id:
            return True
        if self._ar_artifact_id is not None:
            self.exit_ar_mode()
        self._ar_artifact_id = artifact_id
        self._listener.ar_mode_changed(artifact_id, True)
        return True

    def exit_ar_mode(self) -> None:
        artifact_id = self._ar_artifact_id
        if artifact_id is None:
            return
        self._ar_artifact_id = None
        self._listener.ar_mode_changed(artifact_id, False)

    def back_to_gallery(self) -> None:
        self.exit_ar_mode()
        self._flush_pending_selection()
        self._selected_id = None
        self._controller.return_to_overview()
        self._listener.back_to_gallery()

    def update_artifact_position(
        self,
        artifact_id: int,
        position: Vec3,
        rotation: Vec3 | None = None,
        scale: float | None = None,
    ) -> ArtifactPlacement:
        """Move an artifact locally and hand the placement to `save_placement`."""

        for i, a in enumerate(self._artifacts):
            if a.id == artifact_id:
                break
        else:
            raise KeyError(f"Unknown artifact id: {artifact_id}")

        pos = _vec3(position, "position")
        rot = _vec3(rotation, "rotation") if rotation is not None else a.rotation
        sc = float(scale) if scale is not None else float(a.scale)
        if not (math.isfinite(sc) and sc > 0):
            raise ValueError("scale must be a finite number > 0")

        self._artifacts[i] = replace(a, position=pos, rotation=rot, scale=sc)
        placement = ArtifactPlacement(artifact_id=artifact_id, position=pos, rotation=rot, scale=sc)
        self._submit("placement", self._save_placement, placement)
        return placement

    # ---- annotation ----

    def _finish_stroke(self) -> Stroke | None:
        stroke = self._annotation.finish()
        if stroke is None or self._session_id is None:
            return stroke
        self._submit("stroke", self._save_stroke, StrokeSubmission(session_id=self._session_id, stroke=stroke))
        return stroke

    # ---- async saves ----

    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="artspace-save")
            self._owns_executor = True
        return self._executor

    def _submit(self, what: str, fn: Callable[[Any], Any] | None, payload: Any) -> None:
        if fn is None:
            return
        self._saves.append((what, payload, self._get_executor().submit(fn, payload)))

    def _drain_saves(self) -> None:
        still_running: list[tuple[str, Any, Future[Any]]] = []
        for what, payload, fut in self._saves:
            if not fut.done():
                still_running.append((what, payload, fut))
                continue
            exc = fut.exception()
            if exc is not None:
                logger.warning("saving %s failed: %s", what, exc)
                self._listener.notify(f"Failed to save {what}: {exc}")
                if isinstance(payload, StrokeSubmission):
                    self._annotation.mark_failed(payload.stroke)
            elif isinstance(payload, StrokeSubmission):
                self._annotation.mark_saved(payload.stroke)
        self._saves = still_running

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
            self._owns_executor = False

    # ---- clocks ----

    def tick(self) -> Camera:
        """One fixed-rate camera step, plus housekeeping for saves, polling and deferred events."""

        self._drain_saves()
        self._poll_strokes()

        camera = self._controller.tick(self._inputs, direct_control=not self.in_ar_mode)

        pending = self._pending_selection
        if pending is not None:
            pending.ticks += 1
            if not self._controller.is_animating or pending.ticks >= self._config.selection_defer_ticks:
                self._flush_pending_selection()
        return camera

    def _poll_strokes(self) -> None:
        sub = self._subscription
        if sub is None:
            return
        try:
            strokes = sub.poll()
        except Exception as ex:
            logger.warning("stroke refresh failed: %s", ex)
            self._listener.notify(f"Failed to refresh strokes: {ex}")
            return
        if strokes is not None and not self._annotation.replace_remote(strokes):
            logger.debug("stroke refresh dropped while drawing")

    def render(self, surface: Surface | None) -> RenderResult:
        result = self._renderer.render(
            surface,
            camera=self._controller.camera,
            artifacts=self._artifacts,
            selected_id=self._selected_id,
            strokes=self._annotation.strokes,
            current_stroke=self._annotation.current,
            portfolio_title=self.portfolio_title,
        )
        # Picking only ever sees a completed pass.
        self._last_result = result
        return result

    def snapshot_png(self) -> bytes:
        """Render the current viewport to PNG bytes."""

        surface = PillowSurface(int(self._viewport.width), int(self._viewport.height))
        self.render(surface)
        return surface.to_png_bytes()


def _vec3(value: Sequence[float], name: str) -> Vec3:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components")
    out = (float(value[0]), float(value[1]), float(value[2]))
    if not all(math.isfinite(v) for v in out):
        raise ValueError(f"{name} must be finite")
    return out
