from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

logger = logging.getLogger(__name__)


def _mount_dist(app: FastAPI, *, dist_root: Path) -> None:
    index_path = dist_root / "index.html"
    assets_path = dist_root / "assets"

    if not index_path.exists():
        raise FileNotFoundError(str(index_path))

    if assets_path.exists():
        app.mount("/assets", StaticFiles(directory=str(assets_path)), name="assets")

    @app.get("/", include_in_schema=False)
    @app.get("/{path:path}", include_in_schema=False)
    def _spa_index(path: str = ""):  # noqa: ARG001
        return FileResponse(str(index_path))

    logger.info("serving frontend from %s", dist_root)


def mount_frontend(app: FastAPI, dist_root: str | Path | None = None) -> None:
    """Serve a built single-page frontend next to the API.

    Lookup order:

    1) `dist_root`, or the ARTSPACE_FRONTEND_DIST environment variable.
    2) Packaged assets under `artspace/_frontend/dist/`.

    Raises FileNotFoundError when neither has an `index.html`.
    """

    explicit = dist_root if dist_root is not None else os.getenv("ARTSPACE_FRONTEND_DIST", "").strip()
    if explicit:
        _mount_dist(app, dist_root=Path(explicit))
        return

    try:
        from importlib import resources as importlib_resources

        packaged = importlib_resources.files("artspace._frontend").joinpath("dist")
        with importlib_resources.as_file(packaged) as packaged_path:
            packaged_path = Path(packaged_path)
            if (packaged_path / "index.html").exists():
                _mount_dist(app, dist_root=packaged_path)
                return
    except ModuleNotFoundError:
        pass

    raise FileNotFoundError(
        "artspace frontend assets are missing. Set ARTSPACE_FRONTEND_DIST to a built "
        "frontend directory (containing index.html) or run API-only."
    )
