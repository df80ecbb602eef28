from __future__ import annotations

import logging
import math

from .models import ArtifactType, CollaborationSession, Portfolio
from .registry import REGISTRY, InMemoryRegistry

logger = logging.getLogger(__name__)

_DEMO_ARTIFACTS = [
    ("Sales Dashboard", ArtifactType.DATA_VISUALIZATION, False),
    ("Sentiment Model", ArtifactType.ML_NOTEBOOK, False),
    ("Portfolio Site", ArtifactType.WEB_APPLICATION, False),
    ("Sunset Study", ArtifactType.IMAGE, True),
    ("Thesis Draft", ArtifactType.DOCUMENT, False),
]


def seed_demo(registry: InMemoryRegistry = REGISTRY) -> tuple[Portfolio, CollaborationSession]:
    """Populate the store with one public portfolio laid out on an arc, plus a session.

    Returns the portfolio and the session so callers can point a view at them.
    """

    host = registry.create_user(email="demo@artspace.dev", username="demo", display_name="Demo Artist")
    guest = registry.create_user(email="guest@artspace.dev", username="guest", display_name="Guest")

    portfolio = registry.create_portfolio(
        user_id=host.id,
        title="Demo Gallery",
        description="A little bit of everything",
        is_public=True,
    )

    n = len(_DEMO_ARTIFACTS)
    for i, (title, kind, ar) in enumerate(_DEMO_ARTIFACTS):
        angle = math.pi * (i / max(1, n - 1) - 0.5) * 0.8
        registry.create_artifact(
            portfolio_id=portfolio.id,
            title=title,
            type=kind,
            file_url=f"https://example.com/artifacts/{i + 1}",
            position=(6.0 * math.sin(angle), 1.5, -6.0 * math.cos(angle)),
            ar_enabled=ar,
        )

    session = registry.create_collaboration_session(
        portfolio_id=portfolio.id,
        host_user_id=host.id,
        title="Walkthrough",
    )
    registry.join_session(session_id=session.id, user_id=host.id)
    registry.join_session(session_id=session.id, user_id=guest.id)
    registry.create_drawing_stroke(
        session_id=session.id,
        user_id=guest.id,
        stroke_data='[{"x":300,"y":420},{"x":360,"y":400},{"x":420,"y":430}]',
        color="#4ecdc4",
        width=4,
    )

    logger.info("seeded demo portfolio %s with %d artifacts", portfolio.id, n)
    return portfolio, session
