from __future__ import annotations

from .config import DEFAULT_GALLERY_CONFIG, GalleryConfig, ServerSettings, configure_logging
from .core.models import ArtifactType
from .gallery import Camera, GalleryListener, GalleryView, PillowSurface, SceneRenderer
from .runtime.server import ArtSpaceServer, run
from .sdk.client import ArtSpaceClient

__all__ = [
    "run",
    "ArtSpaceServer",
    "ArtSpaceClient",
    "ArtifactType",
    "Camera",
    "GalleryListener",
    "GalleryView",
    "PillowSurface",
    "SceneRenderer",
    "DEFAULT_GALLERY_CONFIG",
    "GalleryConfig",
    "ServerSettings",
    "configure_logging",
]
