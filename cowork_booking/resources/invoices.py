from typing import List

from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_list, parse_model
from cowork_booking.schemas.payments import Invoice

INVOICES_PATH = "/api/factures"


def invoice_pdf_path(invoice_id: int) -> str:
    return f"{INVOICES_PATH}/{invoice_id}/pdf"


def list_invoices(client: ApiClient) -> List[Invoice]:
    return parse_list(Invoice, client.get(INVOICES_PATH))


def create_invoice(client: ApiClient, invoice: Invoice) -> Invoice:
    return parse_model(Invoice, client.post(INVOICES_PATH, invoice.to_wire()))


def delete_invoice(client: ApiClient, invoice_id: int) -> None:
    client.delete(f"{INVOICES_PATH}/{invoice_id}")


def download_invoice_pdf(client: ApiClient, invoice_id: int) -> bytes:
    return client.download(invoice_pdf_path(invoice_id))
