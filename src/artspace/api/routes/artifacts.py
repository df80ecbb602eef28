from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException

from ...core.registry import REGISTRY
from ..parsing import parse_bool, parse_float, parse_vec3
from ..serializers import artifact_to_item


def mount_artifacts_api(app: FastAPI) -> None:
    @app.get("/api/portfolios/{portfolio_id}/artifacts")
    def get_portfolio_artifacts(portfolio_id: int) -> list[dict[str, Any]]:
        if REGISTRY.get_portfolio(portfolio_id) is None:
            raise HTTPException(status_code=404, detail=f"Unknown portfolio: {portfolio_id}")
        return [artifact_to_item(a) for a in REGISTRY.get_portfolio_artifacts(portfolio_id)]

    @app.post("/api/portfolios/{portfolio_id}/artifacts")
    def create_artifact(portfolio_id: int, body: dict) -> dict[str, Any]:
        try:
            artifact = REGISTRY.create_artifact(
                portfolio_id=portfolio_id,
                title=body.get("title"),
                type=body.get("type"),
                file_url=body.get("fileUrl"),
                description=body.get("description"),
                thumbnail_url=body.get("thumbnailUrl"),
                position=parse_vec3(body.get("position", [0, 0, 0]), field="position"),
                rotation=parse_vec3(body.get("rotation", [0, 0, 0]), field="rotation"),
                scale=parse_float(body.get("scale", 1.0), field="scale"),
                ar_enabled=parse_bool(body.get("arEnabled", False), field="arEnabled"),
                metadata=body.get("metadata"),
            )
        except KeyError as ex:
            raise HTTPException(status_code=404, detail=f"Unknown {ex.args[0]}")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return artifact_to_item(artifact)

    @app.get("/api/artifacts/{artifact_id}")
    def get_artifact(artifact_id: int) -> dict[str, Any]:
        artifact = REGISTRY.get_artifact(artifact_id)
        if artifact is None:
            raise HTTPException(status_code=404, detail=f"Unknown artifact: {artifact_id}")
        return artifact_to_item(artifact)

    @app.patch("/api/artifacts/{artifact_id}/position")
    def update_artifact_position(artifact_id: int, body: dict) -> dict[str, Any]:
        # Omitted fields keep their current value.
        current = REGISTRY.get_artifact(artifact_id)
        if current is None:
            raise HTTPException(status_code=404, detail=f"Unknown artifact: {artifact_id}")
        try:
            position = parse_vec3(body["position"], field="position") if "position" in body else current.position
            rotation = parse_vec3(body["rotation"], field="rotation") if "rotation" in body else current.rotation
            scale = parse_float(body["scale"], field="scale") if "scale" in body else current.scale
            updated = REGISTRY.update_artifact_position(
                artifact_id,
                position=position,
                rotation=rotation,
                scale=scale,
            )
        except KeyError as ex:
            raise HTTPException(status_code=404, detail=f"Unknown {ex.args[0]}")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return artifact_to_item(updated)
