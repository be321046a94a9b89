"""
Unit tests for session.py lifecycle and role checks.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cowork_booking.schemas.auth import AuthResponse
from cowork_booking.session import SessionContext


@pytest.mark.unit
def test_init_without_file_is_signed_out(tmp_path: Path) -> None:
    """Test that a missing session file means no current user."""
    session = SessionContext(tmp_path / "currentUser.json")
    session.init()

    assert session.is_logged_in() is False
    assert session.token is None
    assert session.user_id is None


@pytest.mark.unit
def test_init_hydrates_persisted_user(tmp_path: Path) -> None:
    """Test that init restores the user written by a previous sign-in."""
    path = tmp_path / "currentUser.json"
    path.write_text(
        json.dumps({"token": "jwt", "userId": 4, "username": "dora", "role": "ADMIN"}),
        encoding="utf-8",
    )

    session = SessionContext(path)
    session.init()

    assert session.token == "jwt"
    assert session.user_id == 4
    assert session.is_admin() is True
    assert session.is_receptionist() is False


@pytest.mark.unit
@pytest.mark.parametrize("content", ["not json", "{}", '{"userId": 3}'])
def test_init_with_corrupt_file_stays_signed_out(tmp_path: Path, content: str) -> None:
    """Test that an unreadable blob is logged and treated as signed out."""
    path = tmp_path / "currentUser.json"
    path.write_text(content, encoding="utf-8")

    session = SessionContext(path)
    session.init()

    assert session.is_logged_in() is False


@pytest.mark.unit
def test_set_user_then_clear_round_trip(tmp_path: Path) -> None:
    """Test that set_user persists the wire form and clear removes it."""
    path = tmp_path / "nested" / "currentUser.json"
    session = SessionContext(path)

    session.set_user(AuthResponse(token="jwt", user_id=9, role="COWORKER"))

    assert json.loads(path.read_text(encoding="utf-8")) == {"token": "jwt", "userId": 9, "role": "COWORKER"}
    assert session.is_coworker() is True

    session.clear()
    assert not path.exists()
    assert session.has_role("COWORKER") is False
    # Clearing twice is harmless
    session.clear()
