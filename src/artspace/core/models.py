from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ArtifactType(str, Enum):
    """Kind of digital artifact shown in a gallery."""

    DATA_VISUALIZATION = "data_visualization"
    ML_NOTEBOOK = "ml_notebook"
    WEB_APPLICATION = "web_application"
    IMAGE = "image"
    DOCUMENT = "document"

    @classmethod
    def from_any(cls, value: Any) -> "ArtifactType":
        if isinstance(value, cls):
            return value
        v = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.value == v:
                return member
        raise ValueError(
            f"Unsupported artifact type {value!r}. Use one of: {', '.join(m.value for m in cls)}"
        )


@dataclass(frozen=True, kw_only=True)
class User:
    id: int
    email: str
    username: str
    display_name: str
    avatar_url: str | None
    created_at: float
    updated_at: float


@dataclass(frozen=True, kw_only=True)
class Portfolio:
    id: int
    user_id: int
    title: str
    description: str | None
    is_public: bool
    created_at: float
    updated_at: float


@dataclass(frozen=True, kw_only=True)
class Artifact:
    """A portfolio item placed in the 3D gallery.

    Notes:
    - `position`, `rotation` and `scale` are world-space placement values.
    - `rotation` is stored as Euler angles in radians but the gallery renders
      artifacts as camera-facing billboards, so only `position`/`scale` affect drawing.
    """

    id: int
    portfolio_id: int
    title: str
    description: str | None
    type: ArtifactType
    file_url: str
    thumbnail_url: str | None
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: float = 1.0
    ar_enabled: bool = False
    metadata: dict[str, Any] | None = None
    created_at: float
    updated_at: float


@dataclass(frozen=True, kw_only=True)
class CollaborationSession:
    id: int
    portfolio_id: int
    host_user_id: int
    title: str
    is_active: bool
    max_participants: int
    created_at: float
    updated_at: float


@dataclass(frozen=True, kw_only=True)
class SessionParticipant:
    id: int
    session_id: int
    user_id: int
    joined_at: float
    left_at: float | None = None
    is_active: bool = True


@dataclass(frozen=True, kw_only=True)
class DrawingStroke:
    """A persisted annotation stroke.

    `stroke_data` is the JSON-encoded list of screen-space points, kept as text
    so clients can replay it without the server interpreting it.
    """

    id: int
    session_id: int
    user_id: int
    stroke_data: str
    color: str
    width: float
    created_at: float
