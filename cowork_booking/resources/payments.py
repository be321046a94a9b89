from typing import List

from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_list, parse_saved
from cowork_booking.schemas.payments import Payment

PAYMENTS_PATH = "/api/paiements"


def list_payments(client: ApiClient) -> List[Payment]:
    return parse_list(Payment, client.get(PAYMENTS_PATH))


def update_payment(client: ApiClient, payment_id: int, payment: Payment) -> Payment:
    body = client.put(f"{PAYMENTS_PATH}/{payment_id}", payment.to_wire())
    return parse_saved(Payment, body, payment)
