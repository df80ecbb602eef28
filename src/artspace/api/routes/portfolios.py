from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException

from ...core.registry import REGISTRY
from ..parsing import parse_bool, parse_int, require
from ..serializers import portfolio_to_item


def mount_portfolios_api(app: FastAPI) -> None:
    @app.post("/api/portfolios")
    def create_portfolio(body: dict) -> dict[str, Any]:
        try:
            user_id = parse_int(require(body, "userId"), field="userId")
            is_public = parse_bool(body.get("isPublic", False), field="isPublic")
            portfolio = REGISTRY.create_portfolio(
                user_id=user_id,
                title=body.get("title"),
                description=body.get("description"),
                is_public=is_public,
            )
        except KeyError as ex:
            raise HTTPException(status_code=404, detail=f"Unknown {ex.args[0]}")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return portfolio_to_item(portfolio)

    # Registered before /{portfolio_id} so "public" is not parsed as an id.
    @app.get("/api/portfolios/public")
    def get_public_portfolios() -> list[dict[str, Any]]:
        return [portfolio_to_item(p) for p in REGISTRY.get_public_portfolios()]

    @app.get("/api/portfolios/{portfolio_id}")
    def get_portfolio(portfolio_id: int) -> dict[str, Any]:
        portfolio = REGISTRY.get_portfolio(portfolio_id)
        if portfolio is None:
            raise HTTPException(status_code=404, detail=f"Unknown portfolio: {portfolio_id}")
        return portfolio_to_item(portfolio)
