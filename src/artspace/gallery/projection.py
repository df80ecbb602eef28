from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..config import DEFAULT_GALLERY_CONFIG

FOCAL_LENGTH = DEFAULT_GALLERY_CONFIG.focal_length
NEAR_EPSILON = DEFAULT_GALLERY_CONFIG.near_epsilon


@dataclass(frozen=True)
class Camera:
    """Gallery camera pose.

    Conventions:
    - World space is right-handed with +y up.
    - With both angles at zero the camera looks down world -z.
    - `rotation_y` (yaw) turns the view left when increased.
    - `rotation_x` (pitch) tilts the view up when increased; the controller keeps it
      inside [-pi/2, pi/2]. There is no roll.
    """

    x: float = 0.0
    y: float = 2.0
    z: float = 10.0
    rotation_y: float = 0.0
    rotation_x: float = 0.0

    @property
    def position(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def distance_to(self, other: "Camera") -> float:
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2)


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return not (self.width > 0 and self.height > 0)

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2.0, self.height / 2.0)


@dataclass(frozen=True)
class ProjectedPoint:
    screen_x: float
    screen_y: float
    visible: bool
    # Euclidean camera-to-point distance; only meaningful when `visible`.
    distance: float


@dataclass(frozen=True)
class ProjectedPoints:
    screen: np.ndarray  # float64 (n,2)
    visible: np.ndarray  # bool (n,)
    distance: np.ndarray  # float64 (n,)

    def __len__(self) -> int:
        return int(self.visible.shape[0])

    def at(self, i: int) -> ProjectedPoint:
        return ProjectedPoint(
            screen_x=float(self.screen[i, 0]),
            screen_y=float(self.screen[i, 1]),
            visible=bool(self.visible[i]),
            distance=float(self.distance[i]),
        )


def camera_basis(camera: Camera) -> np.ndarray:
    """Return the (3,3) world-to-camera rotation.

    Rows are the camera's right, down and forward axes expressed in world space,
    i.e. the yaw rotation by -rotation_y followed by the pitch rotation by -rotation_x.
    """

    cy, sy = math.cos(camera.rotation_y), math.sin(camera.rotation_y)
    cx, sx = math.cos(camera.rotation_x), math.sin(camera.rotation_x)
    right = (cy, 0.0, -sy)
    down = (-sx * sy, -cx, -sx * cy)
    forward = (-sy * cx, sx, -cy * cx)
    return np.array([right, down, forward], dtype=np.float64)


def project_points(
    points: np.ndarray | list[tuple[float, float, float]],
    camera: Camera,
    viewport: Viewport,
    *,
    focal_length: float = FOCAL_LENGTH,
    near_epsilon: float = NEAR_EPSILON,
) -> ProjectedPoints:
    """Project world-space points (n,3) into screen space.

    Points at or behind the near epsilon are reported as not visible and are never
    divided by; their screen coordinates are left at zero.
    """

    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    delta = pts - np.asarray(camera.position, dtype=np.float64)
    cam = delta @ camera_basis(camera).T

    depth = cam[:, 2]
    with np.errstate(invalid="ignore"):
        visible = depth > float(near_epsilon)
    safe_depth = np.where(visible, depth, 1.0)

    half_w, half_h = viewport.center
    screen = np.zeros((pts.shape[0], 2), dtype=np.float64)
    screen[:, 0] = np.where(visible, cam[:, 0] * focal_length / safe_depth + half_w, 0.0)
    screen[:, 1] = np.where(visible, cam[:, 1] * focal_length / safe_depth + half_h, 0.0)

    distance = np.linalg.norm(delta, axis=1)
    return ProjectedPoints(screen=screen, visible=visible, distance=distance)


def project(
    point: tuple[float, float, float] | list[float] | np.ndarray,
    camera: Camera,
    viewport: Viewport,
    *,
    focal_length: float = FOCAL_LENGTH,
    near_epsilon: float = NEAR_EPSILON,
) -> ProjectedPoint:
    return project_points(
        [point],
        camera,
        viewport,
        focal_length=focal_length,
        near_epsilon=near_epsilon,
    ).at(0)
