from __future__ import annotations

import logging

from fastapi import FastAPI

from ..api import create_api_app
from .web import mount_frontend

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create the full app: API + (optional) built frontend."""

    app = create_api_app()

    # Without a built frontend the API still works on its own.
    try:
        mount_frontend(app)
    except FileNotFoundError:
        logger.debug("no frontend build found; serving API only")

    return app
