"""
Unit tests for services/profile.py updates and their broadcast.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List
from unittest.mock import Mock

import pytest

from cowork_booking.broadcast import ProfileChannel
from cowork_booking.errors import ApiError
from cowork_booking.network.client import ApiClient
from cowork_booking.schemas.users import UserProfile
from cowork_booking.services.profile import update_profile, update_profile_image


@pytest.mark.unit
def test_update_profile_publishes_saved_profile(
    client: ApiClient, http: Mock, make_response: Callable
) -> None:
    """Test that the backend's saved profile is published to subscribers."""
    http.request.return_value = make_response(
        200, {"id": 7, "username": "alice", "firstName": "Alice", "phone": "0611111111"}
    )
    channel = ProfileChannel()
    received: List[Dict[str, Any]] = []
    channel.subscribe(received.append)

    saved = update_profile(client, channel, UserProfile(id=7, username="alice", phone="0611111111"))

    assert saved.first_name == "Alice"
    assert http.request.call_args[0][0] == "PUT"
    assert http.request.call_args[0][1].endswith("/api/profile")
    assert received == [{"id": 7, "username": "alice", "firstName": "Alice", "phone": "0611111111", "roles": []}]


@pytest.mark.unit
def test_update_profile_failure_publishes_nothing(
    client: ApiClient, http: Mock, make_response: Callable
) -> None:
    """Test that a rejected update raises and leaves the channel untouched."""
    http.request.return_value = make_response(400, {"message": "invalid email"})
    channel = ProfileChannel()

    with pytest.raises(ApiError):
        update_profile(client, channel, UserProfile(id=7, email="nope"))

    assert channel.last_value is None


@pytest.mark.unit
def test_update_profile_image_uploads_file(
    client: ApiClient, http: Mock, make_response: Callable, tmp_path: Path
) -> None:
    """Test that the image is sent as a `file` part and its path is broadcast."""
    image = tmp_path / "avatar.png"
    image.write_bytes(b"png")
    http.request.return_value = make_response(200, {"imagePath": "/uploads/avatar.png"})
    channel = ProfileChannel()

    assert update_profile_image(client, channel, image) == "/uploads/avatar.png"

    assert http.request.call_args[0][1].endswith("/api/profile/image")
    parts = http.request.call_args[1]["files"]
    assert parts[0][0] == "file"
    assert channel.last_value == {"profileImagePath": "/uploads/avatar.png"}
