from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException

from ...core.registry import REGISTRY
from ..serializers import portfolio_to_item, user_to_item


def mount_users_api(app: FastAPI) -> None:
    @app.post("/api/users")
    def create_user(body: dict) -> dict[str, Any]:
        try:
            user = REGISTRY.create_user(
                email=body.get("email"),
                username=body.get("username"),
                display_name=body.get("displayName"),
                avatar_url=body.get("avatarUrl"),
            )
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return user_to_item(user)

    @app.get("/api/users/lookup")
    def lookup_user(username: str | None = None, email: str | None = None) -> dict[str, Any]:
        if username is None and email is None:
            raise HTTPException(status_code=400, detail="Provide username or email")
        user = REGISTRY.find_user(username=username, email=email)
        if user is None:
            raise HTTPException(status_code=404, detail="Unknown user")
        return user_to_item(user)

    @app.get("/api/users/{user_id}")
    def get_user(user_id: int) -> dict[str, Any]:
        user = REGISTRY.get_user(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail=f"Unknown user: {user_id}")
        return user_to_item(user)

    @app.get("/api/users/{user_id}/portfolios")
    def get_user_portfolios(user_id: int) -> list[dict[str, Any]]:
        return [portfolio_to_item(p) for p in REGISTRY.get_user_portfolios(user_id)]
