"""Profile edits, broadcast to every screen showing the current user."""

from __future__ import annotations

from pathlib import Path

import structlog

from cowork_booking.broadcast import ProfileChannel
from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_saved
from cowork_booking.schemas.users import UserProfile

logger = structlog.get_logger(__name__)

PROFILE_PATH = "/api/profile"


def update_profile(client: ApiClient, channel: ProfileChannel, profile: UserProfile) -> UserProfile:
    """
    Save profile fields and publish the saved profile on `channel`.

    Nothing is published if the backend rejects the update; the error
    propagates to the caller.
    """
    body = client.put(PROFILE_PATH, profile.to_wire())
    saved = parse_saved(UserProfile, body, profile)
    delivered = channel.publish(saved.to_wire())
    logger.info("profile_updated", user_id=saved.id, observers=delivered)
    return saved


def update_profile_image(client: ApiClient, channel: ProfileChannel, image: Path) -> str:
    """
    Upload a new profile picture.

    Returns:
        str: Server path of the stored image, also published on `channel`
        as `{"profileImagePath": ...}`.
    """
    body = client.send_multipart("POST", f"{PROFILE_PATH}/image", None, files=[("file", image)])
    image_path = (body or {}).get("imagePath", "")
    if not image_path:
        logger.warning("profile_image_path_missing", response=body)
    delivered = channel.publish({"profileImagePath": image_path})
    logger.info("profile_image_updated", image_path=image_path, observers=delivered)
    return image_path
