from __future__ import annotations

import json
import logging

import pytest

from artspace.core.models import DrawingStroke
from artspace.gallery.annotation import (
    AnnotationLayer,
    Stroke,
    StrokeSubscription,
    encode_stroke_points,
    parse_stroke_points,
    strokes_from_records,
)


def _record(sid: int, data: str, *, color: str = "#ff6b6b", width: float = 3.0) -> DrawingStroke:
    return DrawingStroke(id=sid, session_id=1, user_id=1, stroke_data=data, color=color, width=width, created_at=0.0)


def test_parse_accepts_objects_and_pairs() -> None:
    assert parse_stroke_points('[{"x": 1, "y": 2}, {"x": 3.5, "y": 4}]') == ((1.0, 2.0), (3.5, 4.0))
    assert parse_stroke_points([[1, 2], (3, 4)]) == ((1.0, 2.0), (3.0, 4.0))
    assert parse_stroke_points("[]") == ()


def test_encode_then_parse_keeps_points() -> None:
    pts = ((10.0, 20.0), (30.5, 40.25))
    encoded = encode_stroke_points(pts)
    assert json.loads(encoded) == [{"x": 10.0, "y": 20.0}, {"x": 30.5, "y": 40.25}]
    assert parse_stroke_points(encoded) == pts


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"x": 1, "y": 2}',
        "[[1]]",
        '[{"x": "a", "y": 1}]',
        '[{"x": 1}]',
        "[[NaN, 1]]",
        "[[true, 1]]",
    ],
)
def test_parse_rejects_malformed(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_stroke_points(raw)


def test_strokes_from_records_skips_malformed(caplog: pytest.LogCaptureFixture) -> None:
    records = [
        _record(1, "[[1, 2], [3, 4]]", color="#4ecdc4", width=5),
        _record(2, "{broken"),
        _record(3, '[{"x": 0, "y": 0}]'),
    ]

    with caplog.at_level(logging.WARNING, logger="artspace.gallery.annotation"):
        strokes = strokes_from_records(records)

    assert [s.points for s in strokes] == [((1.0, 2.0), (3.0, 4.0)), ((0.0, 0.0),)]
    assert strokes[0].color == "#4ecdc4"
    assert strokes[0].width == 5.0
    assert any("skipping malformed stroke" in r.getMessage() for r in caplog.records)


def test_strokes_from_records_reads_api_items() -> None:
    items = [{"id": 7, "strokeData": "[[1, 1]]", "color": "#45b7d1", "width": 2}]
    assert strokes_from_records(items) == [Stroke(points=((1.0, 1.0),), color="#45b7d1", width=2.0)]


def test_layer_state_machine() -> None:
    layer = AnnotationLayer()
    assert not layer.is_drawing
    assert layer.extend(1.0, 1.0) is False
    assert layer.finish() is None

    layer.begin(0.0, 0.0, color="#ff6b6b", width=3)
    assert layer.is_drawing
    layer.extend(5.0, 5.0)
    layer.extend(10.0, 0.0)
    current = layer.current
    assert current is not None and len(current.points) == 3

    stroke = layer.finish()
    assert stroke is not None
    assert stroke.points == ((0.0, 0.0), (5.0, 5.0), (10.0, 0.0))
    assert not layer.is_drawing
    assert layer.strokes == (stroke,)
    assert layer.current is None


def test_refresh_is_dropped_while_drawing() -> None:
    layer = AnnotationLayer()
    remote = [Stroke(points=((1.0, 1.0),))]

    layer.begin(0.0, 0.0, color="#ff6b6b", width=3)
    assert layer.replace_remote(remote) is False
    assert layer.strokes == ()
    assert layer.is_drawing

    local = layer.finish()
    assert layer.replace_remote(remote) is True
    assert layer.strokes == (*remote, local)


def test_subscription_polls_on_interval(inline_executor, clock) -> None:
    calls: list[int] = []

    def fetch() -> list[Stroke]:
        calls.append(1)
        return [Stroke(points=((float(len(calls)), 0.0),))]

    sub = StrokeSubscription(fetch, inline_executor, interval_s=2.0, clock=clock)

    first = sub.poll()
    assert first is not None and first[0].points == ((1.0, 0.0),)
    assert sub.poll() is None

    clock.advance(1.9)
    assert sub.poll() is None
    clock.advance(0.2)
    second = sub.poll()
    assert second is not None and second[0].points == ((2.0, 0.0),)

    sub.cancel()
    clock.advance(10.0)
    assert sub.cancelled
    assert sub.poll() is None
    assert len(calls) == 2


def test_subscription_surfaces_fetch_errors(inline_executor, clock) -> None:
    def fetch() -> list[Stroke]:
        raise ConnectionError("offline")

    sub = StrokeSubscription(fetch, inline_executor, interval_s=1.0, clock=clock)
    with pytest.raises(ConnectionError):
        sub.poll()
    # The failed attempt still schedules the next one.
    assert sub.poll() is None


def test_refresh_keeps_local_strokes_until_acknowledged() -> None:
    layer = AnnotationLayer()
    layer.begin(5.0, 5.0, color="#ff6b6b", width=3)
    layer.extend(9.0, 9.0)
    local = layer.finish()
    assert local is not None

    # Not saved yet: a snapshot without it must not erase it.
    layer.replace_remote([])
    assert layer.strokes == (local,)
    assert layer.unacknowledged == (local,)

    # Saved, but the snapshot predates the save.
    layer.mark_saved(local)
    assert layer.unacknowledged == ()
    layer.replace_remote([])
    assert layer.strokes == (local,)

    # The backend copy replaces the local one instead of doubling it.
    echoed = Stroke(points=((5.0, 5.0), (9.0, 9.0)), color="#ff6b6b", width=3.0)
    layer.replace_remote([echoed])
    assert layer.strokes == (echoed,)


def test_failed_stroke_stays_local() -> None:
    layer = AnnotationLayer()
    layer.begin(1.0, 1.0, color="#4ecdc4", width=2)
    local = layer.finish()
    assert local is not None
    layer.mark_failed(local)

    remote = [Stroke(points=((7.0, 7.0),))]
    layer.replace_remote(remote)
    layer.replace_remote(remote)
    assert layer.strokes == (*remote, local)
    assert layer.failed == (local,)
