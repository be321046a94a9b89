from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict

from cowork_booking.utils.datetime import parse_backend_datetime

# Backend timestamps, normalized to naive local time
BackendDatetime = Annotated[datetime, BeforeValidator(parse_backend_datetime)]
OptionalBackendDatetime = Annotated[Optional[datetime], BeforeValidator(parse_backend_datetime)]


class WireModel(BaseModel):
    """
    Base for backend DTOs.

    Attributes are snake_case; aliases carry the backend's camelCase field
    names. Unknown fields sent by the backend are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the JSON body the backend expects."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
