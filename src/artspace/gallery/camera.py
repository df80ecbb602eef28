from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from ..config import DEFAULT_GALLERY_CONFIG, GalleryConfig
from .projection import Camera

OVERVIEW_POSE = Camera(x=0.0, y=2.0, z=10.0, rotation_y=0.0, rotation_x=0.0)

MOVE_KEYS = frozenset({"w", "a", "s", "d", "space", "shift"})
LOOK_KEYS = frozenset({"arrowleft", "arrowright", "arrowup", "arrowdown"})

_KEY_ALIASES = {
    " ": "space",
    "spacebar": "space",
    "left": "arrowleft",
    "right": "arrowright",
    "up": "arrowup",
    "down": "arrowdown",
}


def normalize_key(key: str) -> str:
    k = str(key).lower()
    if k != " ":
        k = k.strip()
    return _KEY_ALIASES.get(k, k)


@dataclass(frozen=True)
class InputState:
    """Keys currently held down, as seen by one camera tick."""

    held: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, *keys: str) -> "InputState":
        return cls(held=frozenset(normalize_key(k) for k in keys))

    def pressed(self, key: str) -> "InputState":
        return InputState(held=self.held | {normalize_key(key)})

    def released(self, key: str) -> "InputState":
        return InputState(held=self.held - {normalize_key(key)})

    def is_down(self, key: str) -> bool:
        return normalize_key(key) in self.held


def clamp_pitch(value: float, limit: float = DEFAULT_GALLERY_CONFIG.max_pitch) -> float:
    return max(-limit, min(limit, float(value)))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def lerp_camera(current: Camera, target: Camera, t: float) -> Camera:
    return Camera(
        x=lerp(current.x, target.x, t),
        y=lerp(current.y, target.y, t),
        z=lerp(current.z, target.z, t),
        rotation_y=lerp(current.rotation_y, target.rotation_y, t),
        rotation_x=lerp(current.rotation_x, target.rotation_x, t),
    )


def focus_pose(
    position: tuple[float, float, float],
    config: GalleryConfig = DEFAULT_GALLERY_CONFIG,
) -> Camera:
    """Fly-to pose for looking at an artifact.

    This is a fixed offset from the artifact with a slight downward pitch, not a
    look-at: artifacts off the camera's yaw axis are not guaranteed to be centred.
    """

    ox, oy, oz = config.focus_offset
    return Camera(
        x=float(position[0]) + ox,
        y=float(position[1]) + oy,
        z=float(position[2]) + oz,
        rotation_y=0.0,
        rotation_x=clamp_pitch(config.focus_pitch, config.max_pitch),
    )


class CameraController:
    """Owns the gallery camera.

    Two update paths share one tick:
    - direct control from held keys (plus `drag` for mouse orbiting)
    - fly-to: exponential convergence toward a target pose, after which direct
      control resumes
    """

    def __init__(self, camera: Camera = OVERVIEW_POSE, *, config: GalleryConfig = DEFAULT_GALLERY_CONFIG) -> None:
        self._config = config
        self._camera = replace(camera, rotation_x=clamp_pitch(camera.rotation_x, config.max_pitch))
        self._target: Camera | None = None

    @property
    def camera(self) -> Camera:
        return self._camera

    @property
    def target(self) -> Camera | None:
        return self._target

    @property
    def is_animating(self) -> bool:
        return self._target is not None

    def set_camera(self, camera: Camera) -> None:
        self._camera = replace(camera, rotation_x=clamp_pitch(camera.rotation_x, self._config.max_pitch))

    def fly_to(self, target: Camera) -> None:
        # Retargeting keeps the current interpolated pose as the new starting point.
        self._target = replace(target, rotation_x=clamp_pitch(target.rotation_x, self._config.max_pitch))

    def cancel_fly_to(self) -> None:
        self._target = None

    def focus(self, position: tuple[float, float, float]) -> Camera:
        target = focus_pose(position, self._config)
        self.fly_to(target)
        return target

    def return_to_overview(self) -> Camera:
        self.fly_to(OVERVIEW_POSE)
        return OVERVIEW_POSE

    def tick(self, inputs: InputState, *, direct_control: bool = True) -> Camera:
        """Advance one fixed-rate step and return the new camera."""

        if self._target is not None:
            self._step_fly_to()
        elif direct_control:
            self._step_direct(inputs)
        return self._camera

    def drag(self, dx: float, dy: float) -> Camera:
        s = self._config.drag_sensitivity
        cam = self._camera
        self._camera = replace(
            cam,
            rotation_y=cam.rotation_y + float(dx) * s,
            rotation_x=clamp_pitch(cam.rotation_x + float(dy) * s, self._config.max_pitch),
        )
        return self._camera

    def _step_fly_to(self) -> None:
        target = self._target
        assert target is not None
        nxt = lerp_camera(self._camera, target, self._config.fly_lerp)
        if nxt.distance_to(target) < self._config.fly_epsilon:
            self._camera = target
            self._target = None
        else:
            self._camera = nxt

    def _step_direct(self, inputs: InputState) -> None:
        cfg = self._config
        cam = self._camera
        speed = cfg.move_speed
        rot = cfg.rotation_speed

        sin_y = math.sin(cam.rotation_y)
        cos_y = math.cos(cam.rotation_y)
        x, y, z = cam.x, cam.y, cam.z
        ry, rx = cam.rotation_y, cam.rotation_x

        if inputs.is_down("w"):
            x -= sin_y * speed
            z -= cos_y * speed
        if inputs.is_down("s"):
            x += sin_y * speed
            z += cos_y * speed
        if inputs.is_down("a"):
            x -= cos_y * speed
            z += sin_y * speed
        if inputs.is_down("d"):
            x += cos_y * speed
            z -= sin_y * speed
        if inputs.is_down("space"):
            y += speed
        if inputs.is_down("shift"):
            y -= speed
        if inputs.is_down("arrowleft"):
            ry += rot
        if inputs.is_down("arrowright"):
            ry -= rot
        if inputs.is_down("arrowup"):
            rx += rot
        if inputs.is_down("arrowdown"):
            rx -= rot

        self._camera = Camera(x=x, y=y, z=z, rotation_y=ry, rotation_x=clamp_pitch(rx, cfg.max_pitch))
