from __future__ import annotations

import math

import pytest

from artspace.config import GalleryConfig
from artspace.gallery.camera import (
    OVERVIEW_POSE,
    CameraController,
    InputState,
    focus_pose,
    lerp_camera,
    normalize_key,
)
from artspace.gallery.projection import Camera


def _run(ctrl: CameraController, inputs: InputState, ticks: int) -> Camera:
    cam = ctrl.camera
    for _ in range(ticks):
        cam = ctrl.tick(inputs)
    return cam


def test_initial_camera_is_overview_pose() -> None:
    assert CameraController().camera == OVERVIEW_POSE
    assert OVERVIEW_POSE == Camera(x=0.0, y=2.0, z=10.0, rotation_y=0.0, rotation_x=0.0)


def test_forward_moves_toward_negative_z_at_fixed_speed() -> None:
    cam = _run(CameraController(), InputState.of("w"), 10)
    assert cam.x == pytest.approx(0.0)
    assert cam.y == pytest.approx(2.0)
    assert cam.z == pytest.approx(8.0)

    back = _run(CameraController(), InputState.of("s"), 5)
    assert back.z == pytest.approx(11.0)


def test_strafe_and_vertical_keys() -> None:
    left = _run(CameraController(), InputState.of("a"), 1)
    assert left.x == pytest.approx(-0.2)
    assert left.z == pytest.approx(10.0)

    right = _run(CameraController(), InputState.of("d"), 1)
    assert right.x == pytest.approx(0.2)

    up = _run(CameraController(), InputState.of(" "), 1)
    assert up.y == pytest.approx(2.2)

    down = _run(CameraController(), InputState.of("Shift"), 1)
    assert down.y == pytest.approx(1.8)


def test_forward_follows_yaw() -> None:
    ctrl = CameraController(Camera(rotation_y=math.pi / 2))
    cam = _run(ctrl, InputState.of("w"), 1)
    # Yawed a quarter turn left, forward is world -x.
    assert cam.x == pytest.approx(-0.2)
    assert cam.z == pytest.approx(10.0)


def test_arrow_keys_rotate() -> None:
    cam = _run(CameraController(), InputState.of("ArrowLeft"), 2)
    assert cam.rotation_y == pytest.approx(0.06)

    cam = _run(CameraController(), InputState.of("arrowright", "arrowdown"), 1)
    assert cam.rotation_y == pytest.approx(-0.03)
    assert cam.rotation_x == pytest.approx(-0.03)


def test_pitch_is_clamped_by_keys_and_drag() -> None:
    cam = _run(CameraController(), InputState.of("arrowup"), 200)
    assert cam.rotation_x == pytest.approx(math.pi / 2)

    ctrl = CameraController()
    ctrl.drag(0.0, -10_000.0)
    assert ctrl.camera.rotation_x == pytest.approx(-math.pi / 2)

    clamped = CameraController(Camera(rotation_x=5.0))
    assert clamped.camera.rotation_x == pytest.approx(math.pi / 2)


def test_drag_rotates_by_pixels() -> None:
    ctrl = CameraController()
    cam = ctrl.drag(10.0, 5.0)
    assert cam.rotation_y == pytest.approx(0.1)
    assert cam.rotation_x == pytest.approx(0.05)


def test_input_state_is_immutable_and_normalised() -> None:
    s0 = InputState()
    s1 = s0.pressed("W")
    assert not s0.is_down("w")
    assert s1.is_down("w")
    assert s1.released("w").held == frozenset()
    assert normalize_key("Left") == "arrowleft"
    assert normalize_key(" ") == "space"


def test_fly_to_converges_and_snaps_to_target() -> None:
    ctrl = CameraController()
    target = ctrl.focus((0.0, 0.0, 0.0))
    assert target == focus_pose((0.0, 0.0, 0.0))
    assert (target.x, target.y, target.z) == (0.0, 1.0, 3.0)
    assert target.rotation_y == 0.0
    assert target.rotation_x < 0.0

    for _ in range(200):
        ctrl.tick(InputState())
        if not ctrl.is_animating:
            break

    assert not ctrl.is_animating
    assert ctrl.camera == target


def test_held_keys_are_ignored_during_fly_to() -> None:
    ctrl = CameraController()
    start = ctrl.camera
    target = ctrl.focus((2.0, 0.0, -4.0))

    cam = ctrl.tick(InputState.of("w", "arrowleft"))
    expected = lerp_camera(start, target, 0.1)
    assert cam.x == pytest.approx(expected.x)
    assert cam.z == pytest.approx(expected.z)
    assert cam.rotation_y == pytest.approx(expected.rotation_y)


def test_retarget_continues_from_current_pose() -> None:
    ctrl = CameraController()
    ctrl.focus((0.0, 0.0, -10.0))
    for _ in range(5):
        ctrl.tick(InputState())
    mid = ctrl.camera
    assert mid != OVERVIEW_POSE

    new_target = ctrl.focus((5.0, 0.0, 0.0))
    cam = ctrl.tick(InputState())
    expected = lerp_camera(mid, new_target, 0.1)
    assert cam.x == pytest.approx(expected.x)
    assert cam.z == pytest.approx(expected.z)


def test_direct_control_resumes_after_fly_to() -> None:
    ctrl = CameraController(config=GalleryConfig(fly_lerp=1.0))
    target = ctrl.focus((0.0, 0.0, 0.0))
    ctrl.tick(InputState())
    assert ctrl.camera == target

    cam = ctrl.tick(InputState.of("space"))
    assert cam.y == pytest.approx(target.y + 0.2)


def test_direct_control_can_be_suspended() -> None:
    ctrl = CameraController()
    cam = ctrl.tick(InputState.of("w"), direct_control=False)
    assert cam == OVERVIEW_POSE
