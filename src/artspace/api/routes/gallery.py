from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from starlette.responses import Response

from ...core.registry import REGISTRY
from ...gallery.annotation import Stroke, strokes_from_records
from ...gallery.camera import OVERVIEW_POSE
from ...gallery.scene import SceneRenderer
from ...gallery.surface import PillowSurface
from ..parsing import parse_camera_query, parse_int, parse_optional_int

MAX_SNAPSHOT_SIDE = 4096


def mount_gallery_api(app: FastAPI) -> None:
    renderer = SceneRenderer()

    @app.get("/api/portfolios/{portfolio_id}/gallery.png")
    def render_gallery(portfolio_id: int, request: Request) -> Response:
        """Server-side snapshot of a portfolio's gallery from a given camera pose.

        Query: width, height, x, y, z, rotationY, rotationX, selectedId, sessionId.
        """

        portfolio = REGISTRY.get_portfolio(portfolio_id)
        if portfolio is None:
            raise HTTPException(status_code=404, detail=f"Unknown portfolio: {portfolio_id}")

        params = dict(request.query_params)
        try:
            width = parse_int(params.get("width", 800), field="width")
            height = parse_int(params.get("height", 600), field="height")
            camera = parse_camera_query(params, default=OVERVIEW_POSE)
            selected_id = parse_optional_int(params.get("selectedId"), field="selectedId")
            session_id = parse_optional_int(params.get("sessionId"), field="sessionId")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        if not (0 < width <= MAX_SNAPSHOT_SIDE and 0 < height <= MAX_SNAPSHOT_SIDE):
            raise HTTPException(status_code=400, detail=f"width and height must be in 1..{MAX_SNAPSHOT_SIDE}")

        strokes: list[Stroke] = []
        if session_id is not None:
            if REGISTRY.get_session(session_id) is None:
                raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
            strokes = strokes_from_records(REGISTRY.get_session_drawing_strokes(session_id))

        surface = PillowSurface(width, height)
        renderer.render(
            surface,
            camera=camera,
            artifacts=REGISTRY.get_portfolio_artifacts(portfolio_id),
            selected_id=selected_id,
            strokes=strokes,
            portfolio_title=portfolio.title,
        )
        return Response(content=surface.to_png_bytes(), media_type="image/png")
