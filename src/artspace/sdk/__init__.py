from __future__ import annotations

from .client import ArtSpaceClient, artifact_from_item

__all__ = ["ArtSpaceClient", "artifact_from_item"]
