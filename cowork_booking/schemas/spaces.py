from enum import Enum
from typing import List, Optional

from pydantic import Field

from cowork_booking.schemas.common import WireModel


class SpaceType(str, Enum):
    OPEN = "OUVERT"
    PRIVATE = "PRIVE"


class Space(WireModel):
    """
    Read-only projection of a bookable space.

    Open spaces are used through a subscription; private spaces are booked
    by the hour and priced per day.
    """

    id: Optional[int] = Field(None, description="Space ID")
    name: str = Field(..., description="Display name")
    type: SpaceType = Field(..., description="OUVERT or PRIVE")
    description: Optional[str] = Field(None, description="Free-text description")
    capacity: Optional[int] = Field(None, alias="capacite", description="Seats")
    price: Optional[float] = Field(None, alias="prix", description="Subscription price (open spaces)")
    daily_price: Optional[float] = Field(
        None, alias="prixParJour", description="Price per day (private spaces)"
    )
    is_active: bool = Field(True, alias="isActive", description="Bookable at all")
    main_photo: Optional[str] = Field(None, alias="photoPrincipal")
    gallery: List[str] = Field(default_factory=list)
