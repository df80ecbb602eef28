from __future__ import annotations

from typing import Any, Callable

from ..core.models import Artifact, ArtifactType
from ..gallery.annotation import Stroke, strokes_from_records
from ..gallery.projection import Camera
from ..gallery.view import ArtifactPlacement, StrokeSubmission


def artifact_from_item(item: dict[str, Any]) -> Artifact:
    """Rebuild an `Artifact` record from its API JSON."""

    pos = item.get("position") or [0.0, 0.0, 0.0]
    rot = item.get("rotation") or [0.0, 0.0, 0.0]
    return Artifact(
        id=int(item["id"]),
        portfolio_id=int(item["portfolioId"]),
        title=str(item.get("title") or ""),
        description=item.get("description"),
        type=ArtifactType.from_any(item.get("type")),
        file_url=str(item.get("fileUrl") or ""),
        thumbnail_url=item.get("thumbnailUrl"),
        position=(float(pos[0]), float(pos[1]), float(pos[2])),
        rotation=(float(rot[0]), float(rot[1]), float(rot[2])),
        scale=float(item.get("scale", 1.0)),
        ar_enabled=bool(item.get("arEnabled", False)),
        metadata=item.get("metadata"),
        created_at=float(item.get("createdAt", 0.0)),
        updated_at=float(item.get("updatedAt", 0.0)),
    )


class ArtSpaceClient:
    """HTTP client for a running artspace server."""

    def __init__(self, base_url: str = "http://127.0.0.1:8000", *, timeout_s: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = float(timeout_s)

    def _request(
        self,
        method: str,
        path: str,
        *,
        what: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        import httpx

        with httpx.Client(base_url=self.base_url, timeout=self.timeout_s) as client:
            res = client.request(method, path, json=json, params=params)
            if res.status_code >= 400:
                raise RuntimeError(f"Failed to {what}: {res.status_code} {res.text}")
            if res.headers.get("content-type", "").startswith("application/json"):
                return res.json()
            return res.content

    # ---- server ----

    def healthy(self) -> bool:
        return bool(self._request("GET", "/healthz", what="check health").get("ok"))

    def get_global_revision(self) -> int:
        return int(self._request("GET", "/api/events", what="poll events")["globalRevision"])

    def reset(self) -> None:
        self._request("POST", "/api/reset", what="reset store")

    # ---- users / portfolios ----

    def create_user(self, email: str, username: str, display_name: str, *, avatar_url: str | None = None) -> dict[str, Any]:
        body = {"email": email, "username": username, "displayName": display_name, "avatarUrl": avatar_url}
        return dict(self._request("POST", "/api/users", json=body, what="create user"))

    def get_user(self, user_id: int) -> dict[str, Any]:
        return dict(self._request("GET", f"/api/users/{int(user_id)}", what="get user"))

    def get_user_portfolios(self, user_id: int) -> list[dict[str, Any]]:
        return list(self._request("GET", f"/api/users/{int(user_id)}/portfolios", what="list user portfolios"))

    def create_portfolio(
        self,
        user_id: int,
        title: str,
        *,
        description: str | None = None,
        is_public: bool = False,
    ) -> dict[str, Any]:
        body = {"userId": int(user_id), "title": title, "description": description, "isPublic": bool(is_public)}
        return dict(self._request("POST", "/api/portfolios", json=body, what="create portfolio"))

    def get_portfolio(self, portfolio_id: int) -> dict[str, Any]:
        return dict(self._request("GET", f"/api/portfolios/{int(portfolio_id)}", what="get portfolio"))

    def get_public_portfolios(self) -> list[dict[str, Any]]:
        return list(self._request("GET", "/api/portfolios/public", what="list public portfolios"))

    # ---- artifacts ----

    def create_artifact(
        self,
        portfolio_id: int,
        title: str,
        type: ArtifactType | str,
        file_url: str,
        *,
        description: str | None = None,
        thumbnail_url: str | None = None,
        position: tuple[float, float, float] = (0.0, 0.0, 0.0),
        rotation: tuple[float, float, float] = (0.0, 0.0, 0.0),
        scale: float = 1.0,
        ar_enabled: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        body = {
            "title": title,
            "type": ArtifactType.from_any(type).value,
            "fileUrl": file_url,
            "description": description,
            "thumbnailUrl": thumbnail_url,
            "position": [float(v) for v in position],
            "rotation": [float(v) for v in rotation],
            "scale": float(scale),
            "arEnabled": bool(ar_enabled),
            "metadata": metadata,
        }
        return dict(
            self._request("POST", f"/api/portfolios/{int(portfolio_id)}/artifacts", json=body, what="create artifact")
        )

    def get_portfolio_artifacts(self, portfolio_id: int) -> list[dict[str, Any]]:
        return list(self._request("GET", f"/api/portfolios/{int(portfolio_id)}/artifacts", what="list artifacts"))

    def get_gallery_artifacts(self, portfolio_id: int) -> list[Artifact]:
        """Portfolio artifacts as records ready for `GalleryView.set_artifacts`."""
        return [artifact_from_item(item) for item in self.get_portfolio_artifacts(portfolio_id)]

    def update_artifact_position(
        self,
        artifact_id: int,
        *,
        position: tuple[float, float, float] | None = None,
        rotation: tuple[float, float, float] | None = None,
        scale: float | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if position is not None:
            body["position"] = [float(v) for v in position]
        if rotation is not None:
            body["rotation"] = [float(v) for v in rotation]
        if scale is not None:
            body["scale"] = float(scale)
        return dict(
            self._request("PATCH", f"/api/artifacts/{int(artifact_id)}/position", json=body, what="update artifact position")
        )

    # ---- collaboration ----

    def create_session(self, portfolio_id: int, host_user_id: int, title: str, *, max_participants: int = 10) -> dict[str, Any]:
        body = {
            "portfolioId": int(portfolio_id),
            "hostUserId": int(host_user_id),
            "title": title,
            "maxParticipants": int(max_participants),
        }
        return dict(self._request("POST", "/api/sessions", json=body, what="create session"))

    def join_session(self, session_id: int, user_id: int) -> dict[str, Any]:
        return dict(
            self._request("POST", f"/api/sessions/{int(session_id)}/join", json={"userId": int(user_id)}, what="join session")
        )

    def leave_session(self, session_id: int, user_id: int) -> dict[str, Any]:
        return dict(
            self._request("POST", f"/api/sessions/{int(session_id)}/leave", json={"userId": int(user_id)}, what="leave session")
        )

    def end_session(self, session_id: int) -> dict[str, Any]:
        return dict(self._request("POST", f"/api/sessions/{int(session_id)}/end", what="end session"))

    def get_session_participants(self, session_id: int) -> list[dict[str, Any]]:
        return list(self._request("GET", f"/api/sessions/{int(session_id)}/participants", what="list participants"))

    def create_stroke(self, session_id: int, user_id: int, stroke_data: str, *, color: str, width: float) -> dict[str, Any]:
        body = {"userId": int(user_id), "strokeData": stroke_data, "color": color, "width": float(width)}
        return dict(self._request("POST", f"/api/sessions/{int(session_id)}/strokes", json=body, what="save stroke"))

    def get_session_strokes(self, session_id: int, *, after_id: int | None = None) -> list[dict[str, Any]]:
        params = {"afterId": str(int(after_id))} if after_id is not None else None
        return list(self._request("GET", f"/api/sessions/{int(session_id)}/strokes", params=params, what="list strokes"))

    # ---- rendering ----

    def render_gallery(
        self,
        portfolio_id: int,
        *,
        camera: Camera | None = None,
        width: int = 800,
        height: int = 600,
        selected_id: int | None = None,
        session_id: int | None = None,
    ) -> bytes:
        params: dict[str, Any] = {"width": int(width), "height": int(height)}
        if camera is not None:
            params.update(
                {
                    "x": camera.x,
                    "y": camera.y,
                    "z": camera.z,
                    "rotationY": camera.rotation_y,
                    "rotationX": camera.rotation_x,
                }
            )
        if selected_id is not None:
            params["selectedId"] = int(selected_id)
        if session_id is not None:
            params["sessionId"] = int(session_id)
        return bytes(self._request("GET", f"/api/portfolios/{int(portfolio_id)}/gallery.png", params=params, what="render gallery"))

    # ---- GalleryView adapters ----

    def stroke_saver(self, user_id: int) -> Callable[[StrokeSubmission], dict[str, Any]]:
        """`save_stroke` callable for `GalleryView` that posts as `user_id`."""

        def _save(sub: StrokeSubmission) -> dict[str, Any]:
            return self.create_stroke(
                sub.session_id,
                user_id,
                sub.stroke_data,
                color=sub.stroke.color,
                width=sub.stroke.width,
            )

        return _save

    def placement_saver(self) -> Callable[[ArtifactPlacement], dict[str, Any]]:
        def _save(placement: ArtifactPlacement) -> dict[str, Any]:
            return self.update_artifact_position(
                placement.artifact_id,
                position=placement.position,
                rotation=placement.rotation,
                scale=placement.scale,
            )

        return _save

    def stroke_fetcher(self, session_id: int) -> Callable[[], list[Stroke]]:
        """Fetch callable for `StrokeSubscription`: the session's full stroke list."""

        def _fetch() -> list[Stroke]:
            return strokes_from_records(self.get_session_strokes(session_id))

        return _fetch
