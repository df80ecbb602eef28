from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence
from urllib.parse import urlparse
from urllib.request import url2pathname

import numpy as np
from PIL import Image

from ..config import DEFAULT_GALLERY_CONFIG, GalleryConfig
from ..core.artifact_types import style_for
from ..core.models import Artifact
from .annotation import Stroke
from .picking import ClickRegion
from .projection import Camera, Viewport, project_points
from .surface import Surface

logger = logging.getLogger(__name__)

BACKGROUND_STOPS = ((0.0, "#1a1a2e"), (0.5, "#16213e"), (1.0, "#0f3460"))

GRID_MINOR_COLOR = "rgba(255, 255, 255, 0.1)"
GRID_MAJOR_COLOR = "rgba(255, 255, 255, 0.25)"
GRID_AXIS_COLOR = "rgba(255, 255, 255, 0.45)"

FRAME_COLOR = "rgba(255, 255, 255, 0.9)"
FRAME_SELECTED_COLOR = "rgba(138, 43, 226, 0.8)"
CONTENT_COLOR = "rgba(0, 0, 0, 0.8)"
SELECTION_BORDER_COLOR = "#8a2be2"
HUD_BACKGROUND = "rgba(0, 0, 0, 0.7)"

ThumbnailLoader = Callable[[Artifact], Image.Image | None]


@dataclass(frozen=True)
class VisibleArtifact:
    artifact: Artifact
    screen_x: float
    screen_y: float
    distance: float


@dataclass(frozen=True)
class RenderResult:
    """Outcome of one completed render pass.

    `regions` is in paint order (back to front) and is what picking reads.
    """

    regions: tuple[tuple[int, ClickRegion], ...] = ()
    drawn: tuple[int, ...] = ()
    camera: Camera | None = None
    viewport: Viewport | None = None

    @property
    def is_empty(self) -> bool:
        return not self.regions


EMPTY_RESULT = RenderResult()


def depth_sort(items: Iterable[VisibleArtifact]) -> list[VisibleArtifact]:
    """Farthest first. Stable, so equal distances keep their input order."""

    return sorted(items, key=lambda v: -v.distance)


def visible_artifacts(
    artifacts: Sequence[Artifact],
    camera: Camera,
    viewport: Viewport,
    *,
    config: GalleryConfig = DEFAULT_GALLERY_CONFIG,
) -> list[VisibleArtifact]:
    """Project artifacts and return the visible ones in back-to-front order."""

    if not artifacts:
        return []
    positions = np.array([a.position for a in artifacts], dtype=np.float64)
    proj = project_points(
        positions,
        camera,
        viewport,
        focal_length=config.focal_length,
        near_epsilon=config.near_epsilon,
    )
    out = [
        VisibleArtifact(
            artifact=a,
            screen_x=float(proj.screen[i, 0]),
            screen_y=float(proj.screen[i, 1]),
            distance=float(proj.distance[i]),
        )
        for i, a in enumerate(artifacts)
        if bool(proj.visible[i])
    ]
    return depth_sort(out)


class SceneRenderer:
    """Paints one gallery frame onto a `Surface`.

    The renderer keeps no state between passes; every call recomputes the click
    regions from scratch and returns them in the result.
    """

    def __init__(
        self,
        *,
        config: GalleryConfig = DEFAULT_GALLERY_CONFIG,
        thumbnail_loader: ThumbnailLoader | None = None,
    ) -> None:
        self._config = config
        self._thumbnail_loader = thumbnail_loader

    @property
    def config(self) -> GalleryConfig:
        return self._config

    def render(
        self,
        surface: Surface | None,
        *,
        camera: Camera,
        artifacts: Sequence[Artifact],
        selected_id: int | None = None,
        strokes: Sequence[Stroke] = (),
        current_stroke: Stroke | None = None,
        portfolio_title: str = "",
    ) -> RenderResult:
        if surface is None:
            return EMPTY_RESULT
        width, height = surface.size
        viewport = Viewport(width=float(width), height=float(height))
        if viewport.is_empty:
            return EMPTY_RESULT

        surface.fill_gradient(BACKGROUND_STOPS)
        self._draw_grid(surface, camera, viewport)

        regions: list[tuple[int, ClickRegion]] = []
        drawn: list[int] = []
        for item in visible_artifacts(artifacts, camera, viewport, config=self._config):
            region = self._draw_artifact(surface, item, selected=item.artifact.id == selected_id)
            if region is None:
                continue
            regions.append((item.artifact.id, region))
            drawn.append(item.artifact.id)

        for stroke in strokes:
            self._draw_stroke(surface, stroke)
        if current_stroke is not None:
            self._draw_stroke(surface, current_stroke)

        self._draw_hud(surface, camera, portfolio_title=portfolio_title, artifact_count=len(artifacts))

        return RenderResult(regions=tuple(regions), drawn=tuple(drawn), camera=camera, viewport=viewport)

    def _draw_grid(self, surface: Surface, camera: Camera, viewport: Viewport) -> None:
        cfg = self._config
        ext = int(cfg.grid_extent)
        step = max(1, int(cfg.grid_minor_step))
        coords = list(range(-ext, ext + 1, step))
        if not coords:
            return

        # Two segments per coordinate: one along z (constant x), one along x (constant z).
        starts: list[tuple[float, float, float]] = []
        ends: list[tuple[float, float, float]] = []
        for c in coords:
            starts.append((float(c), 0.0, float(-ext)))
            ends.append((float(c), 0.0, float(ext)))
            starts.append((float(-ext), 0.0, float(c)))
            ends.append((float(ext), 0.0, float(c)))

        a = project_points(starts, camera, viewport, focal_length=cfg.focal_length, near_epsilon=cfg.near_epsilon)
        b = project_points(ends, camera, viewport, focal_length=cfg.focal_length, near_epsilon=cfg.near_epsilon)
        both = a.visible & b.visible

        for i in np.flatnonzero(both):
            c = coords[int(i) // 2]
            if c == 0:
                color, width = GRID_AXIS_COLOR, 2.0
            elif cfg.grid_major_step > 0 and c % int(cfg.grid_major_step) == 0:
                color, width = GRID_MAJOR_COLOR, 1.0
            else:
                color, width = GRID_MINOR_COLOR, 1.0
            surface.line(
                (float(a.screen[i, 0]), float(a.screen[i, 1])),
                (float(b.screen[i, 0]), float(b.screen[i, 1])),
                color=color,
                width=width,
            )

    def _draw_artifact(self, surface: Surface, item: VisibleArtifact, *, selected: bool) -> ClickRegion | None:
        artifact = item.artifact
        size = self._config.base_size * float(artifact.scale)
        if not size > 0:
            return None

        x, y = item.screen_x, item.screen_y
        region = ClickRegion.centered(x, y, size)

        surface.rect(region.x, region.y, size, size, fill=FRAME_SELECTED_COLOR if selected else FRAME_COLOR)

        inset = 5.0
        inner = size - 2 * inset
        surface.rect(region.x + inset, region.y + inset, inner, inner, fill=CONTENT_COLOR)

        thumb = self._load_thumbnail(artifact)
        if thumb is not None:
            surface.image(region.x + inset, region.y + inset, inner, inner, thumb)
        else:
            surface.text(x, y - size / 4, style_for(artifact.type).icon, color="white", size=size / 4, anchor="mm")

        surface.text(x, y + size / 6, artifact.title, color="white", size=size / 8, anchor="mm")

        if selected:
            surface.rect(
                region.x - 2,
                region.y - 2,
                size + 4,
                size + 4,
                outline=SELECTION_BORDER_COLOR,
                outline_width=3,
            )
        return region

    def _load_thumbnail(self, artifact: Artifact) -> Image.Image | None:
        if self._thumbnail_loader is None or not artifact.thumbnail_url:
            return None
        try:
            return self._thumbnail_loader(artifact)
        except (OSError, ValueError) as ex:
            logger.debug("thumbnail for artifact %s unavailable: %s", artifact.id, ex)
            return None

    def _draw_stroke(self, surface: Surface, stroke: Stroke) -> None:
        if not stroke.points:
            return
        surface.polyline(stroke.points, color=stroke.color, width=stroke.width)

    def _draw_hud(self, surface: Surface, camera: Camera, *, portfolio_title: str, artifact_count: int) -> None:
        surface.rect(10, 10, 250, 80, fill=HUD_BACKGROUND)
        surface.text(20, 30, f"Portfolio: {portfolio_title}", color="white", size=14, anchor="ls")
        surface.text(20, 50, f"Artifacts: {artifact_count}", color="white", size=14, anchor="ls")
        surface.text(
            20,
            70,
            f"Camera: ({camera.x:.1f}, {camera.y:.1f}, {camera.z:.1f})",
            color="white",
            size=14,
            anchor="ls",
        )


def load_thumbnail_file(artifact: Artifact) -> Image.Image | None:
    """Thumbnail loader for `file://` URLs and plain local paths."""

    url = artifact.thumbnail_url or ""
    parsed = urlparse(url)
    if parsed.scheme not in ("", "file"):
        return None
    path = url2pathname(parsed.path) if parsed.scheme == "file" else url
    with Image.open(path) as img:
        img.load()
        return img.copy()
