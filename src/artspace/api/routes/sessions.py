from __future__ import annotations

import json
from typing import Any

from fastapi import FastAPI, HTTPException

from ...core.registry import REGISTRY
from ..parsing import parse_float, parse_int, parse_optional_int, require
from ..serializers import participant_to_item, session_to_item, stroke_to_item


def mount_sessions_api(app: FastAPI) -> None:
    @app.post("/api/sessions")
    def create_session(body: dict) -> dict[str, Any]:
        try:
            session = REGISTRY.create_collaboration_session(
                portfolio_id=parse_int(require(body, "portfolioId"), field="portfolioId"),
                host_user_id=parse_int(require(body, "hostUserId"), field="hostUserId"),
                title=body.get("title"),
                max_participants=parse_int(body.get("maxParticipants", 10), field="maxParticipants"),
            )
        except KeyError as ex:
            raise HTTPException(status_code=404, detail=f"Unknown {ex.args[0]}")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return session_to_item(session)

    @app.get("/api/sessions/{session_id}")
    def get_session(session_id: int) -> dict[str, Any]:
        session = REGISTRY.get_session(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return session_to_item(session)

    @app.post("/api/sessions/{session_id}/join")
    def join_session(session_id: int, body: dict) -> dict[str, Any]:
        try:
            user_id = parse_int(require(body, "userId"), field="userId")
            participant = REGISTRY.join_session(session_id=session_id, user_id=user_id)
        except KeyError as ex:
            raise HTTPException(status_code=404, detail=f"Unknown {ex.args[0]}")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return participant_to_item(participant)

    @app.post("/api/sessions/{session_id}/leave")
    def leave_session(session_id: int, body: dict) -> dict[str, Any]:
        try:
            user_id = parse_int(require(body, "userId"), field="userId")
            participant = REGISTRY.leave_session(session_id=session_id, user_id=user_id)
        except KeyError as ex:
            raise HTTPException(status_code=404, detail=f"Unknown {ex.args[0]}")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return participant_to_item(participant)

    @app.post("/api/sessions/{session_id}/end")
    def end_session(session_id: int) -> dict[str, Any]:
        try:
            session = REGISTRY.end_session(session_id)
        except KeyError as ex:
            raise HTTPException(status_code=404, detail=f"Unknown {ex.args[0]}")
        return session_to_item(session)

    @app.get("/api/sessions/{session_id}/participants")
    def get_session_participants(session_id: int) -> list[dict[str, Any]]:
        if REGISTRY.get_session(session_id) is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return [participant_to_item(p) for p in REGISTRY.get_session_participants(session_id)]

    @app.get("/api/sessions/{session_id}/strokes")
    def get_session_strokes(session_id: int, afterId: str | None = None) -> list[dict[str, Any]]:
        if REGISTRY.get_session(session_id) is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        try:
            after_id = parse_optional_int(afterId, field="afterId")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return [stroke_to_item(s) for s in REGISTRY.get_session_drawing_strokes(session_id, after_id=after_id)]

    @app.post("/api/sessions/{session_id}/strokes")
    def create_stroke(session_id: int, body: dict) -> dict[str, Any]:
        raw = body.get("strokeData")
        # Accept an already-decoded point list as well as its JSON text.
        if raw is not None and not isinstance(raw, str):
            raw = json.dumps(raw, separators=(",", ":"))
        try:
            stroke = REGISTRY.create_drawing_stroke(
                session_id=session_id,
                user_id=parse_int(require(body, "userId"), field="userId"),
                stroke_data=raw,
                color=body.get("color"),
                width=parse_float(require(body, "width"), field="width"),
            )
        except KeyError as ex:
            raise HTTPException(status_code=404, detail=f"Unknown {ex.args[0]}")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return stroke_to_item(stroke)
