from enum import Enum
from typing import List, Optional

from pydantic import Field

from cowork_booking.schemas.common import OptionalBackendDatetime, WireModel


class SubscriptionType(str, Enum):
    MONTHLY = "MENSUEL"
    YEARLY = "ANNUEL"

    @property
    def billing_cycle(self) -> str:
        """Name of the matching billing cycle in the plan catalog."""
        return "MONTHLY" if self is SubscriptionType.MONTHLY else "YEARLY"


class Subscription(WireModel):
    """A user's time-boxed right to use an open space."""

    id: Optional[int] = None
    type: SubscriptionType = Field(..., description="MENSUEL or ANNUEL")
    price: float = Field(0, alias="prix")
    start: OptionalBackendDatetime = Field(None, alias="dateDebut")
    end: OptionalBackendDatetime = Field(None, alias="dateFin")
    user_id: int = Field(..., alias="userId")
    user_email: Optional[str] = Field(None, alias="userEmail")
    open_space_id: Optional[int] = Field(None, alias="espaceOuvertId")
    open_space_name: Optional[str] = Field(None, alias="espaceOuvertName")


class SubscriptionPlan(WireModel):
    """Catalog entry; only the billing cycle and the price matter here."""

    id: Optional[int] = None
    name: Optional[str] = None
    type: Optional[str] = Field(None, description="INDIVIDUAL or TEAM")
    billing_cycle: str = Field(..., alias="billingCycle", description="MONTHLY or YEARLY")
    price: float
    features: List[str] = Field(default_factory=list)
