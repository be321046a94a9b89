from enum import Enum
from typing import Optional

from pydantic import Field

from cowork_booking.schemas.common import BackendDatetime, WireModel
from cowork_booking.schemas.spaces import SpaceType


class ReservationStatus(str, Enum):
    PENDING = "EN_ATTENTE"
    CONFIRMED = "VALIDEE"
    CANCELLED = "ANNULEE"


class UnavailabilityWindow(WireModel):
    """Admin-declared interval during which a space cannot be booked."""

    id: Optional[int] = None
    space_id: int = Field(..., alias="espaceId")
    space_name: Optional[str] = Field(None, alias="espaceName")
    start: BackendDatetime = Field(..., alias="dateDebut")
    end: BackendDatetime = Field(..., alias="dateFin")
    reason: Optional[str] = Field(None, alias="raison")


class Reservation(WireModel):
    """
    A booking of a space by a user.

    User and space details are denormalized onto the record by the backend.
    """

    id: Optional[int] = None
    user_id: int = Field(..., alias="userId")
    user_first_name: Optional[str] = Field(None, alias="userFirstName")
    user_last_name: Optional[str] = Field(None, alias="userLastName")
    user_email: Optional[str] = Field(None, alias="userEmail")
    user_phone: Optional[str] = Field(None, alias="userPhone")
    space_id: int = Field(..., alias="espaceId")
    space_name: Optional[str] = Field(None, alias="espaceName")
    space_type: Optional[SpaceType] = Field(None, alias="espaceType")
    start: BackendDatetime = Field(..., alias="dateDebut")
    end: BackendDatetime = Field(..., alias="dateFin")
    amount: Optional[float] = Field(None, alias="paiementMontant")
    status: ReservationStatus = Field(ReservationStatus.PENDING, alias="statut")
    payment_validated: bool = Field(False, alias="paiementValide")
