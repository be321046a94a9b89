from typing import List

from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_list, parse_model, parse_saved
from cowork_booking.schemas.reservations import Reservation

RESERVATIONS_PATH = "/api/reservations"


def list_reservations(client: ApiClient) -> List[Reservation]:
    return parse_list(Reservation, client.get(RESERVATIONS_PATH))


def list_reservations_by_user(client: ApiClient, user_id: int) -> List[Reservation]:
    return parse_list(Reservation, client.get(f"{RESERVATIONS_PATH}/user/{user_id}"))


def list_reservations_by_space(client: ApiClient, space_id: int) -> List[Reservation]:
    return parse_list(Reservation, client.get(f"{RESERVATIONS_PATH}/space/{space_id}"))


def create_reservation(client: ApiClient, reservation: Reservation) -> Reservation:
    return parse_model(Reservation, client.post(RESERVATIONS_PATH, reservation.to_wire()))


def update_reservation(client: ApiClient, reservation_id: int, reservation: Reservation) -> Reservation:
    body = client.put(f"{RESERVATIONS_PATH}/{reservation_id}", reservation.to_wire())
    return parse_saved(Reservation, body, reservation)
