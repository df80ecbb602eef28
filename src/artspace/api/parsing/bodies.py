from __future__ import annotations

from typing import Any

import numpy as np

from ...gallery.projection import Camera


def parse_bool(value: Any, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        raise ValueError(f"Missing {field}")
    s = str(value).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid {field}")


def parse_int(value: Any, *, field: str) -> int:
    if value is None:
        raise ValueError(f"Missing {field}")
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field}")
    try:
        f = float(value)
    except Exception as ex:
        raise ValueError(f"Invalid {field}") from ex
    if not np.isfinite(f) or int(f) != f:
        raise ValueError(f"Invalid {field}")
    return int(f)


def parse_optional_int(value: Any, *, field: str) -> int | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_int(value, field=field)


def parse_float(value: Any, *, field: str) -> float:
    if value is None:
        raise ValueError(f"Missing {field}")
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field}")
    try:
        f = float(value)
    except Exception as ex:
        raise ValueError(f"Invalid {field}") from ex
    if not np.isfinite(f):
        raise ValueError(f"Invalid {field}")
    return f


def parse_vec3(value: Any, *, field: str) -> tuple[float, float, float]:
    if isinstance(value, dict):
        value = [value.get("x"), value.get("y"), value.get("z")]
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"{field} must be a list of 3 numbers")
    return (
        parse_float(value[0], field=f"{field}[0]"),
        parse_float(value[1], field=f"{field}[1]"),
        parse_float(value[2], field=f"{field}[2]"),
    )


def require(body: dict[str, Any], key: str) -> Any:
    if key not in body or body[key] is None:
        raise ValueError(f"Missing field: {key}")
    return body[key]


def parse_camera_query(params: dict[str, Any], *, default: Camera) -> Camera:
    """Read an optional camera pose from query parameters (x, y, z, rotationY, rotationX)."""

    def _get(key: str, fallback: float) -> float:
        raw = params.get(key)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return fallback
        return parse_float(raw, field=key)

    return Camera(
        x=_get("x", default.x),
        y=_get("y", default.y),
        z=_get("z", default.z),
        rotation_y=_get("rotationY", default.rotation_y),
        rotation_x=_get("rotationX", default.rotation_x),
    )
