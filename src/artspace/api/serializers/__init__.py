from __future__ import annotations

from .records import (
    artifact_to_item,
    participant_to_item,
    portfolio_to_item,
    session_to_item,
    stroke_to_item,
    user_to_item,
    vec3_to_list,
)

__all__ = [
    "artifact_to_item",
    "participant_to_item",
    "portfolio_to_item",
    "session_to_item",
    "stroke_to_item",
    "user_to_item",
    "vec3_to_list",
]
