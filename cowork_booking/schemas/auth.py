from typing import Optional

from pydantic import BaseModel, Field

from cowork_booking.schemas.common import WireModel


class SignInPayload(BaseModel):
    username: str
    password: str


class SignUpPayload(WireModel):
    username: str
    email: str
    password: str
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    phone: Optional[str] = None
    role: Optional[str] = None


class AuthResponse(WireModel):
    """
    Signed-in user as returned by /api/auth/signin.

    This is the blob persisted between runs as the session's current user.
    """

    token: str = Field(..., description="Bearer token")
    user_id: Optional[int] = Field(None, alias="userId")
    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = Field(None, description="ADMIN, COWORKER, RECEPTIONISTE, ...")
