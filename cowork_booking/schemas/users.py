from typing import List, Optional

from pydantic import Field

from cowork_booking.schemas.common import WireModel


class UserProfile(WireModel):
    """User details copied onto reservations and shown on the profile screen."""

    id: Optional[int] = None
    username: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    profile_image_path: Optional[str] = Field(None, alias="profileImagePath")
