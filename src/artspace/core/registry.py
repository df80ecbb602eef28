from __future__ import annotations

import json
import logging
import re
import threading
import time
from dataclasses import replace
from typing import Any

import numpy as np

from .models import (
    Artifact,
    ArtifactType,
    CollaborationSession,
    DrawingStroke,
    Portfolio,
    SessionParticipant,
    User,
)

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://[^\s/]+\S*$")
_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


class InMemoryRegistry:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._portfolios: dict[int, Portfolio] = {}
        self._artifacts: dict[int, Artifact] = {}
        self._sessions: dict[int, CollaborationSession] = {}
        self._participants: dict[int, SessionParticipant] = {}
        self._strokes: dict[int, DrawingStroke] = {}
        self._next_ids: dict[str, int] = {}
        self._global_revision = 0

    def _next_id_locked(self, table: str) -> int:
        nid = self._next_ids.get(table, 0) + 1
        self._next_ids[table] = nid
        return nid

    def _bump_locked(self) -> None:
        self._global_revision += 1

    @staticmethod
    def _require_text(value: Any, *, name: str, min_len: int, max_len: int) -> str:
        if value is None:
            raise ValueError(f"{name} is required")
        s = str(value).strip()
        if len(s) < min_len or len(s) > max_len:
            raise ValueError(f"{name} must be between {min_len} and {max_len} characters")
        return s

    @staticmethod
    def _optional_text(value: Any) -> str | None:
        if value is None:
            return None
        s = str(value).strip()
        return s or None

    @staticmethod
    def _require_url(value: Any, *, name: str) -> str:
        s = str(value or "").strip()
        if not _URL_RE.match(s):
            raise ValueError(f"{name} must be a valid URL")
        return s

    @staticmethod
    def _finite_vec3(
        value: tuple[float, float, float] | list[float] | np.ndarray,
        *,
        name: str,
    ) -> tuple[float, float, float]:
        try:
            arr = np.asarray(value, dtype=np.float64).reshape(3)
        except (TypeError, ValueError) as ex:
            raise ValueError(f"{name} must be 3 numeric values") from ex
        if not np.all(np.isfinite(arr)):
            raise ValueError(f"{name} must contain finite numeric values")
        return (float(arr[0]), float(arr[1]), float(arr[2]))

    @staticmethod
    def _positive_scale(value: Any) -> float:
        try:
            s = float(value)
        except (TypeError, ValueError) as ex:
            raise ValueError("scale must be a number") from ex
        if not np.isfinite(s) or s <= 0.0:
            raise ValueError("scale must be a finite positive number")
        return s

    def global_revision(self) -> int:
        with self._lock:
            return self._global_revision

    # -- users ---------------------------------------------------------------

    def create_user(
        self,
        *,
        email: str,
        username: str,
        display_name: str,
        avatar_url: str | None = None,
    ) -> User:
        email_v = str(email or "").strip().lower()
        if not _EMAIL_RE.match(email_v):
            raise ValueError("email must be a valid email address")
        username_v = self._require_text(username, name="username", min_len=3, max_len=50)
        display_v = self._require_text(display_name, name="display_name", min_len=1, max_len=100)
        avatar_v = self._require_url(avatar_url, name="avatar_url") if avatar_url else None

        with self._lock:
            for u in self._users.values():
                if u.email == email_v:
                    raise ValueError(f"email already registered: {email_v}")
                if u.username == username_v:
                    raise ValueError(f"username already taken: {username_v}")

            now = time.time()
            user = User(
                id=self._next_id_locked("users"),
                email=email_v,
                username=username_v,
                display_name=display_v,
                avatar_url=avatar_v,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            self._bump_locked()
            logger.debug("created user %s (%s)", user.id, user.username)
            return user

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(int(user_id))

    def find_user(self, *, username: str | None = None, email: str | None = None) -> User | None:
        with self._lock:
            for u in self._users.values():
                if username is not None and u.username == str(username).strip():
                    return u
                if email is not None and u.email == str(email).strip().lower():
                    return u
            return None

    def _require_user_locked(self, user_id: int) -> User:
        user = self._users.get(int(user_id))
        if user is None:
            raise KeyError(f"user {user_id}")
        return user

    # -- portfolios ----------------------------------------------------------

    def create_portfolio(
        self,
        *,
        user_id: int,
        title: str,
        description: str | None = None,
        is_public: bool = False,
    ) -> Portfolio:
        title_v = self._require_text(title, name="title", min_len=1, max_len=200)
        with self._lock:
            self._require_user_locked(user_id)
            now = time.time()
            portfolio = Portfolio(
                id=self._next_id_locked("portfolios"),
                user_id=int(user_id),
                title=title_v,
                description=self._optional_text(description),
                is_public=bool(is_public),
                created_at=now,
                updated_at=now,
            )
            self._portfolios[portfolio.id] = portfolio
            self._bump_locked()
            logger.debug("created portfolio %s for user %s", portfolio.id, user_id)
            return portfolio

    def get_portfolio(self, portfolio_id: int) -> Portfolio | None:
        with self._lock:
            return self._portfolios.get(int(portfolio_id))

    def get_user_portfolios(self, user_id: int) -> list[Portfolio]:
        with self._lock:
            out = [p for p in self._portfolios.values() if p.user_id == int(user_id)]
        # Newest first; id breaks ties between portfolios created in the same instant.
        out.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return out

    def get_public_portfolios(self) -> list[Portfolio]:
        with self._lock:
            return [p for p in self._portfolios.values() if p.is_public]

    def _require_portfolio_locked(self, portfolio_id: int) -> Portfolio:
        portfolio = self._portfolios.get(int(portfolio_id))
        if portfolio is None:
            raise KeyError(f"portfolio {portfolio_id}")
        return portfolio

    # -- artifacts -----------------------------------------------------------

    def create_artifact(
        self,
        *,
        portfolio_id: int,
        title: str,
        type: ArtifactType | str,
        file_url: str,
        description: str | None = None,
        thumbnail_url: str | None = None,
        position: tuple[float, float, float] | list[float] | np.ndarray = (0.0, 0.0, 0.0),
        rotation: tuple[float, float, float] | list[float] | np.ndarray = (0.0, 0.0, 0.0),
        scale: float = 1.0,
        ar_enabled: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> Artifact:
        title_v = self._require_text(title, name="title", min_len=1, max_len=200)
        type_v = ArtifactType.from_any(type)
        file_url_v = self._require_url(file_url, name="file_url")
        thumb_v = self._require_url(thumbnail_url, name="thumbnail_url") if thumbnail_url else None
        pos = self._finite_vec3(position, name="position")
        rot = self._finite_vec3(rotation, name="rotation")
        scale_v = self._positive_scale(scale)
        if metadata is not None and not isinstance(metadata, dict):
            raise ValueError("metadata must be an object")

        with self._lock:
            self._require_portfolio_locked(portfolio_id)
            now = time.time()
            artifact = Artifact(
                id=self._next_id_locked("artifacts"),
                portfolio_id=int(portfolio_id),
                title=title_v,
                description=self._optional_text(description),
                type=type_v,
                file_url=file_url_v,
                thumbnail_url=thumb_v,
                position=pos,
                rotation=rot,
                scale=scale_v,
                ar_enabled=bool(ar_enabled),
                metadata=dict(metadata) if metadata is not None else None,
                created_at=now,
                updated_at=now,
            )
            self._artifacts[artifact.id] = artifact
            self._bump_locked()
            logger.debug("created artifact %s in portfolio %s", artifact.id, portfolio_id)
            return artifact

    def get_artifact(self, artifact_id: int) -> Artifact | None:
        with self._lock:
            return self._artifacts.get(int(artifact_id))

    def get_portfolio_artifacts(self, portfolio_id: int) -> list[Artifact]:
        with self._lock:
            return [a for a in self._artifacts.values() if a.portfolio_id == int(portfolio_id)]

    def update_artifact_position(
        self,
        artifact_id: int,
        *,
        position: tuple[float, float, float] | list[float] | np.ndarray,
        rotation: tuple[float, float, float] | list[float] | np.ndarray,
        scale: float,
    ) -> Artifact:
        pos = self._finite_vec3(position, name="position")
        rot = self._finite_vec3(rotation, name="rotation")
        scale_v = self._positive_scale(scale)

        with self._lock:
            prev = self._artifacts.get(int(artifact_id))
            if prev is None:
                raise KeyError(f"artifact {artifact_id}")
            updated = replace(prev, position=pos, rotation=rot, scale=scale_v, updated_at=time.time())
            self._artifacts[updated.id] = updated
            self._bump_locked()
            return updated

    # -- collaboration sessions ------------------------------------------------

    def create_collaboration_session(
        self,
        *,
        portfolio_id: int,
        host_user_id: int,
        title: str,
        max_participants: int = 10,
    ) -> CollaborationSession:
        title_v = self._require_text(title, name="title", min_len=1, max_len=200)
        if isinstance(max_participants, bool) or not isinstance(max_participants, (int, float)):
            raise ValueError("max_participants must be an integer")
        if int(max_participants) != max_participants:
            raise ValueError("max_participants must be an integer")
        max_p = int(max_participants)
        if max_p < 2 or max_p > 50:
            raise ValueError("max_participants must be between 2 and 50")

        with self._lock:
            self._require_portfolio_locked(portfolio_id)
            self._require_user_locked(host_user_id)
            now = time.time()
            session = CollaborationSession(
                id=self._next_id_locked("sessions"),
                portfolio_id=int(portfolio_id),
                host_user_id=int(host_user_id),
                title=title_v,
                is_active=True,
                max_participants=max_p,
                created_at=now,
                updated_at=now,
            )
            self._sessions[session.id] = session
            self._bump_locked()
            logger.debug("created session %s on portfolio %s", session.id, portfolio_id)
            return session

    def get_session(self, session_id: int) -> CollaborationSession | None:
        with self._lock:
            return self._sessions.get(int(session_id))

    def _require_session_locked(self, session_id: int) -> CollaborationSession:
        session = self._sessions.get(int(session_id))
        if session is None:
            raise KeyError(f"session {session_id}")
        return session

    def _active_participant_locked(self, session_id: int, user_id: int) -> SessionParticipant | None:
        for p in self._participants.values():
            if p.session_id == int(session_id) and p.user_id == int(user_id) and p.is_active:
                return p
        return None

    def join_session(self, *, session_id: int, user_id: int) -> SessionParticipant:
        with self._lock:
            session = self._require_session_locked(session_id)
            if not session.is_active:
                raise ValueError("Collaboration session is not active")
            self._require_user_locked(user_id)

            existing = self._active_participant_locked(session_id, user_id)
            if existing is not None:
                return existing

            active = sum(1 for p in self._participants.values() if p.session_id == session.id and p.is_active)
            if active >= session.max_participants:
                raise ValueError("Collaboration session is full")

            participant = SessionParticipant(
                id=self._next_id_locked("participants"),
                session_id=session.id,
                user_id=int(user_id),
                joined_at=time.time(),
            )
            self._participants[participant.id] = participant
            self._bump_locked()
            logger.debug("user %s joined session %s", user_id, session.id)
            return participant

    def leave_session(self, *, session_id: int, user_id: int) -> SessionParticipant:
        with self._lock:
            self._require_session_locked(session_id)
            existing = self._active_participant_locked(session_id, user_id)
            if existing is None:
                raise KeyError(f"user {user_id} is not an active participant of session {session_id}")
            left = replace(existing, is_active=False, left_at=time.time())
            self._participants[left.id] = left
            self._bump_locked()
            logger.debug("user %s left session %s", user_id, session_id)
            return left

    def end_session(self, session_id: int) -> CollaborationSession:
        with self._lock:
            session = self._require_session_locked(session_id)
            if not session.is_active:
                return session
            now = time.time()
            ended = replace(session, is_active=False, updated_at=now)
            self._sessions[ended.id] = ended
            for pid, p in list(self._participants.items()):
                if p.session_id == ended.id and p.is_active:
                    self._participants[pid] = replace(p, is_active=False, left_at=now)
            self._bump_locked()
            return ended

    def get_session_participants(self, session_id: int) -> list[SessionParticipant]:
        with self._lock:
            return [p for p in self._participants.values() if p.session_id == int(session_id)]

    # -- drawing strokes ------------------------------------------------------

    def create_drawing_stroke(
        self,
        *,
        session_id: int,
        user_id: int,
        stroke_data: str,
        color: str,
        width: float,
    ) -> DrawingStroke:
        if not isinstance(stroke_data, str):
            raise ValueError("stroke_data must be a JSON string")
        try:
            json.loads(stroke_data)
        except json.JSONDecodeError as ex:
            raise ValueError("stroke_data must be valid JSON") from ex
        color_v = str(color or "")
        if not _COLOR_RE.match(color_v):
            raise ValueError("color must be a hex color like #ff6b6b")
        try:
            width_v = float(width)
        except (TypeError, ValueError) as ex:
            raise ValueError("width must be a number") from ex
        if not np.isfinite(width_v) or width_v < 1.0 or width_v > 50.0:
            raise ValueError("width must be between 1 and 50")

        with self._lock:
            self._require_session_locked(session_id)
            self._require_user_locked(user_id)
            stroke = DrawingStroke(
                id=self._next_id_locked("strokes"),
                session_id=int(session_id),
                user_id=int(user_id),
                stroke_data=stroke_data,
                color=color_v,
                width=width_v,
                created_at=time.time(),
            )
            self._strokes[stroke.id] = stroke
            self._bump_locked()
            return stroke

    def get_session_drawing_strokes(self, session_id: int, *, after_id: int | None = None) -> list[DrawingStroke]:
        with self._lock:
            out = [s for s in self._strokes.values() if s.session_id == int(session_id)]
        if after_id is not None:
            out = [s for s in out if s.id > int(after_id)]
        out.sort(key=lambda s: s.id)
        return out

    def reset(self) -> None:
        with self._lock:
            self._users.clear()
            self._portfolios.clear()
            self._artifacts.clear()
            self._sessions.clear()
            self._participants.clear()
            self._strokes.clear()
            self._next_ids.clear()
            self._bump_locked()


REGISTRY = InMemoryRegistry()
