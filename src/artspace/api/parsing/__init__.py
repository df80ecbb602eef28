from __future__ import annotations

from .bodies import (
    parse_bool,
    parse_camera_query,
    parse_float,
    parse_int,
    parse_optional_int,
    parse_vec3,
    require,
)

__all__ = [
    "parse_bool",
    "parse_camera_query",
    "parse_float",
    "parse_int",
    "parse_optional_int",
    "parse_vec3",
    "require",
]
