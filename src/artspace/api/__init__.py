from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..core.registry import REGISTRY
from .routes import (
    mount_artifacts_api,
    mount_gallery_api,
    mount_portfolios_api,
    mount_sessions_api,
    mount_users_api,
)

logger = logging.getLogger(__name__)


def create_api_app() -> FastAPI:
    app = FastAPI(title="artspace", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    mount_users_api(app)
    mount_portfolios_api(app)
    mount_artifacts_api(app)
    mount_sessions_api(app)
    mount_gallery_api(app)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/events")
    def events() -> dict:
        # Minimal polling endpoint; clients refetch when the revision moves.
        return {"globalRevision": REGISTRY.global_revision()}

    @app.post("/api/reset")
    def reset_store() -> dict[str, bool]:
        REGISTRY.reset()
        logger.info("store reset")
        return {"ok": True}

    return app
