from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class GalleryConfig:
    """Tuning constants for the gallery projector, camera and renderer.

    Distances are world units, angles are radians and speeds are per camera tick.
    """

    focal_length: float = 800.0
    near_epsilon: float = 0.1

    tick_interval_s: float = 0.016
    move_speed: float = 0.2
    rotation_speed: float = 0.03
    drag_sensitivity: float = 0.01
    max_pitch: float = math.pi / 2

    fly_lerp: float = 0.1
    fly_epsilon: float = 0.1
    focus_offset: tuple[float, float, float] = (0.0, 1.0, 3.0)
    focus_pitch: float = -0.25
    # Upper bound on how long a selection event may wait for its fly-to.
    selection_defer_ticks: int = 90

    grid_extent: int = 20
    grid_minor_step: int = 2
    grid_major_step: int = 10

    base_size: float = 100.0
    stroke_width: float = 3.0
    stroke_color: str = "#ff6b6b"
    stroke_poll_interval_s: float = 2.0


DEFAULT_GALLERY_CONFIG = GalleryConfig()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default) in {"1", "true", "True", "yes"}


@dataclass(frozen=True)
class ServerSettings:
    host: str = "127.0.0.1"
    port: int = 8000
    url: str = ""
    log_level: str = "info"
    seed_demo: bool = False

    @classmethod
    def from_env(cls) -> "ServerSettings":
        port_raw = os.getenv("ARTSPACE_PORT", "").strip()
        try:
            port = int(port_raw) if port_raw else cls.port
        except ValueError as ex:
            raise ValueError(f"ARTSPACE_PORT must be an integer, got {port_raw!r}") from ex
        return cls(
            host=os.getenv("ARTSPACE_HOST", cls.host),
            port=port,
            url=os.getenv("ARTSPACE_URL", "").strip(),
            log_level=os.getenv("ARTSPACE_LOG_LEVEL", cls.log_level).strip().lower() or cls.log_level,
            seed_demo=_env_flag("ARTSPACE_SEED_DEMO"),
        )


def configure_logging(level: str | int | None = None) -> None:
    """Configure the `artspace` logger hierarchy.

    Uses ARTSPACE_LOG_LEVEL when no explicit level is given.
    """

    if level is None:
        level = os.getenv("ARTSPACE_LOG_LEVEL", "info")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    root = logging.getLogger("artspace")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
