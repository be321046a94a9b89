from typing import List

from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_list, parse_model
from cowork_booking.schemas.payments import Event

EVENTS_PATH = "/api/admin/events"


def list_events(client: ApiClient) -> List[Event]:
    return parse_list(Event, client.get(EVENTS_PATH))


def register_participant(client: ApiClient, event_id: int, user_id: int) -> Event:
    return parse_model(Event, client.post(f"{EVENTS_PATH}/{event_id}/register/{user_id}", {}))


def cancel_participation(client: ApiClient, event_id: int, user_id: int) -> Event:
    return parse_model(Event, client.post(f"{EVENTS_PATH}/{event_id}/cancel/{user_id}", {}))
