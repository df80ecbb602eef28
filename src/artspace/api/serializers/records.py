from __future__ import annotations

from typing import Any

from ...core.artifact_types import style_for
from ...core.models import (
    Artifact,
    CollaborationSession,
    DrawingStroke,
    Portfolio,
    SessionParticipant,
    User,
)


def vec3_to_list(v: tuple[float, float, float]) -> list[float]:
    return [float(v[0]), float(v[1]), float(v[2])]


def user_to_item(u: User) -> dict[str, Any]:
    return {
        "id": u.id,
        "email": u.email,
        "username": u.username,
        "displayName": u.display_name,
        "avatarUrl": u.avatar_url,
        "createdAt": float(u.created_at),
        "updatedAt": float(u.updated_at),
    }


def portfolio_to_item(p: Portfolio) -> dict[str, Any]:
    return {
        "id": p.id,
        "userId": p.user_id,
        "title": p.title,
        "description": p.description,
        "isPublic": bool(p.is_public),
        "createdAt": float(p.created_at),
        "updatedAt": float(p.updated_at),
    }


def artifact_to_item(a: Artifact) -> dict[str, Any]:
    style = style_for(a.type)
    return {
        "id": a.id,
        "portfolioId": a.portfolio_id,
        "title": a.title,
        "description": a.description,
        "type": a.type.value,
        "typeLabel": style.label,
        "typeIcon": style.icon,
        "typeColor": "#%02x%02x%02x" % style.color,
        "fileUrl": a.file_url,
        "thumbnailUrl": a.thumbnail_url,
        "position": vec3_to_list(a.position),
        "rotation": vec3_to_list(a.rotation),
        "scale": float(a.scale),
        "arEnabled": bool(a.ar_enabled),
        "metadata": a.metadata,
        "createdAt": float(a.created_at),
        "updatedAt": float(a.updated_at),
    }


def session_to_item(s: CollaborationSession) -> dict[str, Any]:
    return {
        "id": s.id,
        "portfolioId": s.portfolio_id,
        "hostUserId": s.host_user_id,
        "title": s.title,
        "isActive": bool(s.is_active),
        "maxParticipants": int(s.max_participants),
        "createdAt": float(s.created_at),
        "updatedAt": float(s.updated_at),
    }


def participant_to_item(p: SessionParticipant) -> dict[str, Any]:
    return {
        "id": p.id,
        "sessionId": p.session_id,
        "userId": p.user_id,
        "joinedAt": float(p.joined_at),
        "leftAt": float(p.left_at) if p.left_at is not None else None,
        "isActive": bool(p.is_active),
    }


def stroke_to_item(s: DrawingStroke) -> dict[str, Any]:
    return {
        "id": s.id,
        "sessionId": s.session_id,
        "userId": s.user_id,
        "strokeData": s.stroke_data,
        "color": s.color,
        "width": float(s.width),
        "createdAt": float(s.created_at),
    }
