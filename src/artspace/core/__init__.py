from __future__ import annotations

from .artifact_types import ARTIFACT_STYLES, ArtifactStyle, style_for
from .models import (
    Artifact,
    ArtifactType,
    CollaborationSession,
    DrawingStroke,
    Portfolio,
    SessionParticipant,
    User,
)
from .registry import REGISTRY, InMemoryRegistry

__all__ = [
    "ARTIFACT_STYLES",
    "ArtifactStyle",
    "style_for",
    "Artifact",
    "ArtifactType",
    "CollaborationSession",
    "DrawingStroke",
    "Portfolio",
    "SessionParticipant",
    "User",
    "REGISTRY",
    "InMemoryRegistry",
]
