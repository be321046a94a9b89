from enum import Enum
from typing import List, Optional

from pydantic import Field

from cowork_booking.schemas.common import OptionalBackendDatetime, WireModel


class PaymentType(str, Enum):
    RESERVATION = "RESERVATION"
    SUBSCRIPTION = "ABONNEMENT"
    EVENT = "EVENEMENT"


class PaymentStatus(str, Enum):
    PENDING = "EN_ATTENTE"
    VALIDATED = "VALIDE"
    CANCELLED = "ANNULE"


class Payment(WireModel):
    """A monetary transaction tied to exactly one reservation, subscription or event."""

    id: Optional[int] = None
    type: PaymentType
    amount: float = Field(0, alias="montant")
    status: PaymentStatus = Field(PaymentStatus.PENDING, alias="statut")
    user_id: Optional[int] = Field(None, alias="userId")
    reservation_id: Optional[int] = Field(None, alias="reservationId")
    subscription_id: Optional[int] = Field(None, alias="abonnementId")
    event_id: Optional[int] = Field(None, alias="evenementId")
    date: OptionalBackendDatetime = Field(None, alias="datePaiement")


class Invoice(WireModel):
    id: Optional[int] = None
    payment_id: int = Field(..., alias="paiementId")
    pdf_url: str = Field(..., alias="pdfUrl")
    recipient_email: str = Field(..., alias="emailDestinataire")
    sent_at: OptionalBackendDatetime = Field(None, alias="dateEnvoi")


class Participant(WireModel):
    user_id: Optional[int] = Field(None, alias="userId")
    user_email: Optional[str] = Field(None, alias="userEmail")
    user_first_name: Optional[str] = Field(None, alias="userFirstName")
    user_last_name: Optional[str] = Field(None, alias="userLastName")


class Event(WireModel):
    id: Optional[int] = None
    title: Optional[str] = Field(None, alias="titre")
    space_id: Optional[int] = Field(None, alias="espaceId")
    space_name: Optional[str] = Field(None, alias="espaceName")
    start: OptionalBackendDatetime = Field(None, alias="dateDebut")
    end: OptionalBackendDatetime = Field(None, alias="dateFin")
    price: Optional[float] = Field(None, alias="prix")
    participants: List[Participant] = Field(default_factory=list)
