from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class ClickRegion:
    """Axis-aligned screen-space rectangle for one artifact in one frame."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def centered(cls, cx: float, cy: float, size: float) -> "ClickRegion":
        return cls(x=cx - size / 2.0, y=cy - size / 2.0, width=size, height=size)

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


def pick(regions: Iterable[tuple[int, ClickRegion]], px: float, py: float) -> int | None:
    """Return the artifact id under (px, py), or None.

    `regions` is in paint order (back to front), so the last match is the one the
    user sees on top.
    """

    hit: int | None = None
    for artifact_id, region in regions:
        if region.contains(px, py):
            hit = artifact_id
    return hit


@dataclass
class DragState:
    """Pointer-drag bookkeeping for camera orbiting."""

    active: bool = False
    last_x: float = 0.0
    last_y: float = 0.0

    def start(self, x: float, y: float) -> None:
        self.active = True
        self.last_x = float(x)
        self.last_y = float(y)

    def move(self, x: float, y: float) -> tuple[float, float] | None:
        """Return the delta since the last position, or None when not dragging."""

        if not self.active:
            return None
        dx = float(x) - self.last_x
        dy = float(y) - self.last_y
        self.last_x = float(x)
        self.last_y = float(y)
        return dx, dy

    def stop(self) -> None:
        self.active = False
