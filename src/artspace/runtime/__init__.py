from __future__ import annotations

from .app import create_app
from .server import ArtSpaceServer, run

__all__ = ["create_app", "ArtSpaceServer", "run"]
