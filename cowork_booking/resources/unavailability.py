from typing import List

from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_list
from cowork_booking.schemas.reservations import UnavailabilityWindow

UNAVAILABILITY_PATH = "/api/indisponibilites"


def list_unavailabilities(client: ApiClient) -> List[UnavailabilityWindow]:
    return parse_list(UnavailabilityWindow, client.get(UNAVAILABILITY_PATH))


def list_unavailabilities_for_space(client: ApiClient, space_id: int) -> List[UnavailabilityWindow]:
    """The backend has no per-space route; filter the full list."""
    return [w for w in list_unavailabilities(client) if w.space_id == space_id]
