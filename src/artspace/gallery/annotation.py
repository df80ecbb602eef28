from __future__ import annotations

import json
import logging
import math
import time
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from ..config import DEFAULT_GALLERY_CONFIG

logger = logging.getLogger(__name__)

Point2 = tuple[float, float]

STROKE_PALETTE = ("#ff6b6b", "#4ecdc4", "#45b7d1", "#96ceb4", "#ffeaa7", "#dda0dd")


@dataclass(frozen=True)
class Stroke:
    """A finished annotation stroke in screen space."""

    points: tuple[Point2, ...]
    color: str = DEFAULT_GALLERY_CONFIG.stroke_color
    width: float = DEFAULT_GALLERY_CONFIG.stroke_width


@dataclass
class StrokeBuilder:
    color: str
    width: float
    points: list[Point2] = field(default_factory=list)

    def append(self, x: float, y: float) -> None:
        self.points.append((float(x), float(y)))

    def freeze(self) -> Stroke:
        return Stroke(points=tuple(self.points), color=self.color, width=self.width)


def encode_stroke_points(points: Iterable[Point2]) -> str:
    return json.dumps([{"x": float(x), "y": float(y)} for x, y in points], separators=(",", ":"))


def parse_stroke_points(raw: str | bytes | Sequence[Any]) -> tuple[Point2, ...]:
    """Decode a persisted point list.

    Accepts a JSON string (or already-decoded list) of `{"x":..,"y":..}` objects or
    `[x, y]` pairs. Raises ValueError for anything else.
    """

    data: Any = raw
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as ex:
            raise ValueError("stroke points are not valid JSON") from ex
    if not isinstance(data, list):
        raise ValueError("stroke points must be a list")

    out: list[Point2] = []
    for item in data:
        if isinstance(item, dict):
            x, y = item.get("x"), item.get("y")
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            x, y = item
        else:
            raise ValueError(f"invalid stroke point: {item!r}")
        if isinstance(x, bool) or isinstance(y, bool) or not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
            raise ValueError(f"invalid stroke point: {item!r}")
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError(f"non-finite stroke point: {item!r}")
        out.append((float(x), float(y)))
    return tuple(out)


def strokes_from_records(records: Iterable[Any]) -> list[Stroke]:
    """Build replayable strokes from persisted records.

    Records only need `stroke_data`, `color` and `width` attributes (or keys). A record
    with a malformed point list is skipped rather than failing the whole batch.
    """

    out: list[Stroke] = []
    for rec in records:
        get = rec.get if isinstance(rec, dict) else (lambda k, _r=rec: getattr(_r, k, None))
        raw = get("stroke_data")
        if raw is None:
            raw = get("strokeData")
        try:
            points = parse_stroke_points(raw if raw is not None else "")
            width = float(get("width"))
        except (TypeError, ValueError) as ex:
            logger.warning("skipping malformed stroke %r: %s", get("id"), ex)
            continue
        out.append(Stroke(points=points, color=str(get("color") or DEFAULT_GALLERY_CONFIG.stroke_color), width=width))
    return out


@dataclass
class _LocalStroke:
    stroke: Stroke
    saved: bool = False
    failed: bool = False


class AnnotationLayer:
    """Freehand annotation overlay.

    State machine: idle -> drawing (begin) -> idle (finish). Strokes live in screen
    space and do not move with the camera.

    Finished strokes stay local until the backend acknowledges them. A remote
    snapshot replaces only the remote part of the collection; a local stroke is
    dropped once it has been saved and shows up in a snapshot. A stroke whose save
    failed is kept for good.
    """

    def __init__(self) -> None:
        self._remote: list[Stroke] = []
        self._local: list[_LocalStroke] = []
        self._current: StrokeBuilder | None = None

    @property
    def is_drawing(self) -> bool:
        return self._current is not None

    @property
    def strokes(self) -> tuple[Stroke, ...]:
        return tuple(self._remote) + tuple(entry.stroke for entry in self._local)

    @property
    def unacknowledged(self) -> tuple[Stroke, ...]:
        return tuple(entry.stroke for entry in self._local if not entry.saved)

    @property
    def failed(self) -> tuple[Stroke, ...]:
        return tuple(entry.stroke for entry in self._local if entry.failed)

    @property
    def current(self) -> Stroke | None:
        return self._current.freeze() if self._current is not None else None

    def begin(self, x: float, y: float, *, color: str, width: float) -> None:
        self._current = StrokeBuilder(color=color, width=float(width))
        self._current.append(x, y)

    def extend(self, x: float, y: float) -> bool:
        if self._current is None:
            return False
        self._current.append(x, y)
        return True

    def finish(self) -> Stroke | None:
        """Freeze the in-progress stroke and return it, or None if nothing was drawn."""

        builder = self._current
        self._current = None
        if builder is None or not builder.points:
            return None
        stroke = builder.freeze()
        self._local.append(_LocalStroke(stroke))
        return stroke

    def cancel(self) -> None:
        self._current = None

    def _entry(self, stroke: Stroke) -> _LocalStroke | None:
        for entry in self._local:
            if entry.stroke is stroke:
                return entry
        return None

    def mark_saved(self, stroke: Stroke) -> None:
        entry = self._entry(stroke)
        if entry is not None:
            entry.saved = True

    def mark_failed(self, stroke: Stroke) -> None:
        entry = self._entry(stroke)
        if entry is not None:
            entry.failed = True

    def replace_remote(self, strokes: Sequence[Stroke]) -> bool:
        """Replace the remote part of the collection with a fresh snapshot.

        Dropped while a local stroke is in progress so a refresh never clobbers it.
        """

        if self.is_drawing:
            return False
        self._remote = list(strokes)
        remaining: list[Stroke] = list(self._remote)
        kept: list[_LocalStroke] = []
        for entry in self._local:
            if entry.saved and entry.stroke in remaining:
                # Each remote copy acknowledges at most one local stroke.
                remaining.remove(entry.stroke)
                continue
            kept.append(entry)
        self._local = kept
        return True


class StrokeSubscription:
    """Cancellable pull channel for a session's strokes.

    `poll()` is called from the view's tick. When the interval has elapsed it submits
    `fetch` to the executor; a later poll returns the completed snapshot. It never
    blocks on the fetch.
    """

    def __init__(
        self,
        fetch: Callable[[], Sequence[Stroke]],
        executor: Executor,
        *,
        interval_s: float = DEFAULT_GALLERY_CONFIG.stroke_poll_interval_s,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._executor = executor
        self._interval_s = float(interval_s)
        self._clock = clock
        self._next_due = clock()
        self._pending: Future[Sequence[Stroke]] | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def poll(self) -> list[Stroke] | None:
        """Return a fresh snapshot if one completed since the last poll.

        Re-raises the fetch error so the caller can report it.
        """

        if self._cancelled:
            return None

        if self._pending is not None:
            if not self._pending.done():
                return None
            fut, self._pending = self._pending, None
            self._next_due = self._clock() + self._interval_s
            return list(fut.result())

        if self._clock() >= self._next_due:
            self._pending = self._executor.submit(self._fetch)
            # Executors that run inline complete immediately.
            if self._pending.done():
                return self.poll()
        return None
