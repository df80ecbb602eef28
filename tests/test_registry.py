from __future__ import annotations

import json

import pytest

from artspace.core.artifact_types import ARTIFACT_STYLES, style_for
from artspace.core.models import ArtifactType
from artspace.core.registry import InMemoryRegistry


def _user(reg: InMemoryRegistry, name: str = "alice"):
    return reg.create_user(email=f"{name}@example.com", username=name, display_name=name.title())


def _portfolio(reg: InMemoryRegistry, user_id: int, *, public: bool = False, title: str = "Works"):
    return reg.create_portfolio(user_id=user_id, title=title, is_public=public)


def test_users_are_unique_and_validated() -> None:
    reg = InMemoryRegistry()
    u = reg.create_user(email="Alice@Example.com", username="alice", display_name="Alice")
    assert u.id == 1
    assert u.email == "alice@example.com"
    assert reg.get_user(u.id) == u
    assert reg.find_user(username="alice") == u
    assert reg.find_user(email="ALICE@example.com") == u
    assert reg.get_user(99) is None

    with pytest.raises(ValueError):
        reg.create_user(email="alice@example.com", username="other", display_name="Other")
    with pytest.raises(ValueError):
        reg.create_user(email="bob@example.com", username="alice", display_name="Bob")
    with pytest.raises(ValueError):
        reg.create_user(email="not-an-email", username="bob", display_name="Bob")
    with pytest.raises(ValueError):
        reg.create_user(email="bob@example.com", username="ab", display_name="Bob")
    with pytest.raises(ValueError):
        reg.create_user(email="bob@example.com", username="bob", display_name="")


def test_portfolios_require_owner_and_sort_newest_first() -> None:
    reg = InMemoryRegistry()
    u = _user(reg)
    first = _portfolio(reg, u.id, title="First")
    second = _portfolio(reg, u.id, public=True, title="Second")

    assert first.is_public is False
    assert [p.id for p in reg.get_user_portfolios(u.id)] == [second.id, first.id]
    assert reg.get_public_portfolios() == [second]
    assert reg.get_user_portfolios(999) == []

    with pytest.raises(KeyError):
        _portfolio(reg, 999)
    with pytest.raises(ValueError):
        reg.create_portfolio(user_id=u.id, title="   ")


def test_artifact_defaults_and_validation() -> None:
    reg = InMemoryRegistry()
    p = _portfolio(reg, _user(reg).id)

    a = reg.create_artifact(portfolio_id=p.id, title="Chart", type="data_visualization", file_url="https://x.io/c")
    assert a.type is ArtifactType.DATA_VISUALIZATION
    assert a.position == (0.0, 0.0, 0.0)
    assert a.rotation == (0.0, 0.0, 0.0)
    assert a.scale == 1.0
    assert a.ar_enabled is False
    assert reg.get_portfolio_artifacts(p.id) == [a]

    with pytest.raises(KeyError):
        reg.create_artifact(portfolio_id=42, title="x", type="image", file_url="https://x.io")
    with pytest.raises(ValueError):
        reg.create_artifact(portfolio_id=p.id, title="x", type="sculpture", file_url="https://x.io")
    with pytest.raises(ValueError):
        reg.create_artifact(portfolio_id=p.id, title="x", type="image", file_url="not a url")
    with pytest.raises(ValueError):
        reg.create_artifact(portfolio_id=p.id, title="x", type="image", file_url="https://x.io", scale=0)
    with pytest.raises(ValueError):
        reg.create_artifact(portfolio_id=p.id, title="x", type="image", file_url="https://x.io", position=(1, 2))
    with pytest.raises(ValueError):
        reg.create_artifact(portfolio_id=p.id, title="x", type="image", file_url="https://x.io", metadata=[1])


def test_update_artifact_position() -> None:
    reg = InMemoryRegistry()
    p = _portfolio(reg, _user(reg).id)
    a = reg.create_artifact(portfolio_id=p.id, title="Img", type=ArtifactType.IMAGE, file_url="https://x.io/i")

    rev = reg.global_revision()
    moved = reg.update_artifact_position(a.id, position=(1, 2, 3), rotation=(0, 0.5, 0), scale=2)
    assert moved.position == (1.0, 2.0, 3.0)
    assert moved.rotation == (0.0, 0.5, 0.0)
    assert moved.scale == 2.0
    assert moved.updated_at >= a.updated_at
    assert reg.get_artifact(a.id) == moved
    assert reg.global_revision() == rev + 1

    with pytest.raises(KeyError):
        reg.update_artifact_position(99, position=(0, 0, 0), rotation=(0, 0, 0), scale=1)
    with pytest.raises(ValueError):
        reg.update_artifact_position(a.id, position=(0, 0, 0), rotation=(0, 0, 0), scale=-1)
    with pytest.raises(ValueError):
        reg.update_artifact_position(a.id, position=(float("nan"), 0, 0), rotation=(0, 0, 0), scale=1)


def test_session_lifecycle() -> None:
    reg = InMemoryRegistry()
    host = _user(reg, "host")
    guest = _user(reg, "guest")
    third = _user(reg, "third")
    p = _portfolio(reg, host.id)

    s = reg.create_collaboration_session(portfolio_id=p.id, host_user_id=host.id, title="Review", max_participants=2)
    assert s.is_active is True

    a = reg.join_session(session_id=s.id, user_id=host.id)
    again = reg.join_session(session_id=s.id, user_id=host.id)
    assert again == a
    reg.join_session(session_id=s.id, user_id=guest.id)

    with pytest.raises(ValueError, match="full"):
        reg.join_session(session_id=s.id, user_id=third.id)

    left = reg.leave_session(session_id=s.id, user_id=guest.id)
    assert left.is_active is False
    assert left.left_at is not None
    reg.join_session(session_id=s.id, user_id=third.id)
    assert len(reg.get_session_participants(s.id)) == 3

    ended = reg.end_session(s.id)
    assert ended.is_active is False
    assert all(not pp.is_active for pp in reg.get_session_participants(s.id))
    with pytest.raises(ValueError, match="not active"):
        reg.join_session(session_id=s.id, user_id=guest.id)
    with pytest.raises(KeyError):
        reg.join_session(session_id=99, user_id=guest.id)


@pytest.mark.parametrize("max_participants", [1, 51, 2.5, True, None, "ten"])
def test_session_size_bounds(max_participants) -> None:
    reg = InMemoryRegistry()
    u = _user(reg)
    p = _portfolio(reg, u.id)
    with pytest.raises(ValueError):
        reg.create_collaboration_session(
            portfolio_id=p.id,
            host_user_id=u.id,
            title="S",
            max_participants=max_participants,
        )


def test_drawing_strokes() -> None:
    reg = InMemoryRegistry()
    u = _user(reg)
    p = _portfolio(reg, u.id)
    s = reg.create_collaboration_session(portfolio_id=p.id, host_user_id=u.id, title="S")

    data = json.dumps([{"x": 1, "y": 2}])
    s1 = reg.create_drawing_stroke(session_id=s.id, user_id=u.id, stroke_data=data, color="#ff6b6b", width=3)
    s2 = reg.create_drawing_stroke(session_id=s.id, user_id=u.id, stroke_data=data, color="#4ECDC4", width=50)

    assert reg.get_session_drawing_strokes(s.id) == [s1, s2]
    assert reg.get_session_drawing_strokes(s.id, after_id=s1.id) == [s2]

    with pytest.raises(ValueError):
        reg.create_drawing_stroke(session_id=s.id, user_id=u.id, stroke_data="{oops", color="#ff6b6b", width=3)
    with pytest.raises(ValueError):
        reg.create_drawing_stroke(session_id=s.id, user_id=u.id, stroke_data=data, color="red", width=3)
    with pytest.raises(ValueError):
        reg.create_drawing_stroke(session_id=s.id, user_id=u.id, stroke_data=data, color="#ff6b6b", width=0.5)
    with pytest.raises(KeyError):
        reg.create_drawing_stroke(session_id=99, user_id=u.id, stroke_data=data, color="#ff6b6b", width=3)


def test_reset_clears_everything_and_bumps_revision() -> None:
    reg = InMemoryRegistry()
    _portfolio(reg, _user(reg).id)
    rev = reg.global_revision()
    reg.reset()
    assert reg.get_user(1) is None
    assert reg.get_public_portfolios() == []
    assert reg.global_revision() > rev
    # Ids restart after a reset.
    assert _user(reg).id == 1


def test_every_artifact_type_has_a_style() -> None:
    assert set(ARTIFACT_STYLES) == set(ArtifactType)
    assert style_for("web-application").label == "Web Application"
