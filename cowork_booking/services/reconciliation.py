"""
Payment/invoice reconciliation for the receptionist dashboard.

Loads payments, reservations, events and subscriptions together, then the
invoices. Every payment references exactly one of the other three
collections; resolving that reference gives the invoice recipient.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

import structlog

from cowork_booking.config import DOWNLOAD_DIR, EVENT_PLACEHOLDER_EMAIL, PAGE_SIZE, SIGNIN_ROUTE
from cowork_booking.errors import (
    MissingRecipientError,
    MissingReferenceError,
    SessionExpiredError,
    TransportError,
)
from cowork_booking.metrics import invoices_generated, view_loads
from cowork_booking.network.client import ApiClient
from cowork_booking.network.join import fork_join
from cowork_booking.notifications import Notifier
from cowork_booking.resources import events as events_api
from cowork_booking.resources import invoices as invoices_api
from cowork_booking.resources import payments as payments_api
from cowork_booking.resources import reservations as reservations_api
from cowork_booking.resources import subscriptions as subscriptions_api
from cowork_booking.schemas.payments import Event, Invoice, Payment, PaymentStatus, PaymentType
from cowork_booking.schemas.reservations import Reservation
from cowork_booking.schemas.subscriptions import Subscription
from cowork_booking.utils.datetime import local_now

logger = structlog.get_logger(__name__)

T = TypeVar("T")

LOAD_ERROR = "Erreur lors du chargement des données"

FIRST_PARTICIPANT_WARNING = "Utilisateur exact non trouvé, utilisation du premier participant"
NO_PARTICIPANT_WARNING = "Aucun participant trouvé, email par défaut utilisé"

# Shown when the payment's foreign key is set but the target is not loaded
MISSING_TARGET_MESSAGES = {
    "reservation": "Réservation associée introuvable",
    "subscription": "Abonnement associé introuvable",
    "event": "Événement associé introuvable",
}

# Shown when the payment's foreign key is not set at all
UNLINKED_MESSAGES = {
    "reservation": "Ce paiement n'est lié à aucune réservation",
    "subscription": "Ce paiement n'est lié à aucun abonnement",
    "event": "Ce paiement n'est lié à aucun événement",
}

# Shown when the resolved record has no email
NO_EMAIL_MESSAGES = {
    "reservation": "Aucun email associé à cette réservation",
    "subscription": "Aucun email associé à cet abonnement",
}


def missing_reference_message(error: MissingReferenceError) -> str:
    messages = UNLINKED_MESSAGES if error.ref_id is None else MISSING_TARGET_MESSAGES
    return messages.get(error.entity, str(error))


@dataclass(frozen=True)
class Counterpart:
    """Who an invoice for a payment goes to."""

    email: str
    display_label: str
    warning: Optional[str] = None


class Paginator:
    """
    Page cursor over a client-held list.

    The list is passed in on every call, so a reload never leaves the
    cursor pointing at stale data; only the page number is kept.
    """

    def __init__(self, page_size: int = PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self.page = 1

    def total_pages(self, items: Sequence[T]) -> int:
        return max(1, math.ceil(len(items) / self.page_size))

    def slice(self, items: Sequence[T]) -> List[T]:
        self.page = min(self.page, self.total_pages(items))
        offset = (self.page - 1) * self.page_size
        return list(items[offset : offset + self.page_size])

    def next_page(self, items: Sequence[T]) -> int:
        if self.page < self.total_pages(items):
            self.page += 1
        return self.page

    def previous_page(self) -> int:
        if self.page > 1:
            self.page -= 1
        return self.page

    def reset(self) -> None:
        self.page = 1


def _find(items: Sequence[T], item_id: Optional[int]) -> Optional[T]:
    return next((item for item in items if getattr(item, "id", None) == item_id), None)


# =============================================================================
# Counterpart resolution, one resolver per PaymentType
# =============================================================================


def _reservation_counterpart(view: "ReconciliationView", payment: Payment) -> Counterpart:
    if payment.reservation_id is None:
        raise MissingReferenceError("reservation", payment.id, None)
    reservation = _find(view.reservations, payment.reservation_id)
    if reservation is None:
        raise MissingReferenceError("reservation", payment.id, payment.reservation_id)
    if not reservation.user_email:
        raise MissingRecipientError("reservation", payment.id, reservation.id)
    return Counterpart(reservation.user_email, view.payment_info(payment))


def _subscription_counterpart(view: "ReconciliationView", payment: Payment) -> Counterpart:
    if payment.subscription_id is None:
        raise MissingReferenceError("subscription", payment.id, None)
    subscription = _find(view.subscriptions, payment.subscription_id)
    if subscription is None:
        raise MissingReferenceError("subscription", payment.id, payment.subscription_id)
    if not subscription.user_email:
        raise MissingRecipientError("subscription", payment.id, subscription.id)
    return Counterpart(subscription.user_email, view.payment_info(payment))


def _event_counterpart(view: "ReconciliationView", payment: Payment) -> Counterpart:
    if payment.event_id is None:
        raise MissingReferenceError("event", payment.id, None)
    event = _find(view.events, payment.event_id)
    if event is None:
        raise MissingReferenceError("event", payment.id, payment.event_id)

    label = view.payment_info(payment)
    participant = next((p for p in event.participants if p.user_id == payment.user_id), None)
    if participant is not None:
        return Counterpart(participant.user_email or "", label)

    if event.participants:
        logger.warning(
            "event_participant_not_matched",
            payment_id=payment.id,
            event_id=event.id,
            user_id=payment.user_id,
        )
        return Counterpart(
            event.participants[0].user_email or "", label, FIRST_PARTICIPANT_WARNING
        )

    logger.warning("event_has_no_participants", payment_id=payment.id, event_id=event.id)
    return Counterpart(EVENT_PLACEHOLDER_EMAIL, label, NO_PARTICIPANT_WARNING)


COUNTERPART_RESOLVERS: Dict[PaymentType, Callable[["ReconciliationView", Payment], Counterpart]] = {
    PaymentType.RESERVATION: _reservation_counterpart,
    PaymentType.SUBSCRIPTION: _subscription_counterpart,
    PaymentType.EVENT: _event_counterpart,
}


# =============================================================================
# Display labels, one per PaymentType
# =============================================================================


def _reservation_label(view: "ReconciliationView", payment: Payment) -> str:
    if payment.reservation_id is None:
        return "Réservation (ID non spécifié)"
    reservation = _find(view.reservations, payment.reservation_id)
    if reservation is None:
        return "Réservation d'espace privé (inconnue)"
    return f"#{reservation.id} Réservation - {reservation.space_name}"


def _subscription_label(view: "ReconciliationView", payment: Payment) -> str:
    if payment.subscription_id is None:
        return "Abonnement (ID non spécifié)"
    subscription = _find(view.subscriptions, payment.subscription_id)
    if subscription is None:
        return "Abonnement d'espace ouvert (inconnu)"
    return f"#{subscription.id} Abonnement - {subscription.open_space_name}"


def _event_label(view: "ReconciliationView", payment: Payment) -> str:
    if payment.event_id is None:
        return "Événement (ID non spécifié)"
    event = _find(view.events, payment.event_id)
    if event is None:
        return "Événement dans espace privé (inconnu)"
    return f"#{event.id} Participation à un événement - {event.space_name}"


PAYMENT_LABELS: Dict[PaymentType, Callable[["ReconciliationView", Payment], str]] = {
    PaymentType.RESERVATION: _reservation_label,
    PaymentType.SUBSCRIPTION: _subscription_label,
    PaymentType.EVENT: _event_label,
}

if set(COUNTERPART_RESOLVERS) != set(PaymentType):
    raise RuntimeError("COUNTERPART_RESOLVERS must cover every PaymentType")
if set(PAYMENT_LABELS) != set(PaymentType):
    raise RuntimeError("PAYMENT_LABELS must cover every PaymentType")


class ReconciliationView:
    """
    State behind the receptionist's payments and invoices screen.

    Attributes:
        error: Message of the last failed load or action, "" when none
        redirect_to: Route the screen should navigate to after a session error
        pending_pages, validated_pages, unpaid_pages, invoice_pages:
            Independent page cursors over the four tables
    """

    def __init__(
        self,
        client: ApiClient,
        notifier: Notifier,
        download_dir: Path = DOWNLOAD_DIR,
        page_size: int = PAGE_SIZE,
    ):
        self.client = client
        self.notifier = notifier
        self.download_dir = download_dir

        self.payments: List[Payment] = []
        self.reservations: List[Reservation] = []
        self.events: List[Event] = []
        self.subscriptions: List[Subscription] = []
        self.invoices: List[Invoice] = []

        self.is_loading = False
        self.error = ""
        self.redirect_to: Optional[str] = None

        self.pending_pages = Paginator(page_size)
        self.validated_pages = Paginator(page_size)
        self.unpaid_pages = Paginator(page_size)
        self.invoice_pages = Paginator(page_size)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> bool:
        """
        Load the four collections together, then the invoices.

        If any of the four fetches fails, nothing is kept: every collection
        is emptied and `error` is set.

        Returns:
            bool: True if everything loaded.
        """
        self.is_loading = True
        self.error = ""

        try:
            fetched = fork_join(
                {
                    "payments": lambda: payments_api.list_payments(self.client),
                    "reservations": lambda: reservations_api.list_reservations(self.client),
                    "events": lambda: events_api.list_events(self.client),
                    "subscriptions": lambda: subscriptions_api.list_subscriptions(self.client),
                }
            )
        except TransportError as e:
            logger.error("reconciliation_load_failed", error=str(e))
            self._clear()
            self.error = LOAD_ERROR
            self.is_loading = False
            view_loads.labels(view="reconciliation", status="error").inc()
            return False

        self.payments = fetched["payments"]
        self.reservations = fetched["reservations"]
        self.events = fetched["events"]
        self.subscriptions = fetched["subscriptions"]

        loaded = self.load_invoices()
        view_loads.labels(view="reconciliation", status="success" if loaded else "error").inc()
        logger.info(
            "reconciliation_loaded",
            payments=len(self.payments),
            reservations=len(self.reservations),
            events=len(self.events),
            subscriptions=len(self.subscriptions),
            invoices=len(self.invoices),
        )
        return loaded

    def load_invoices(self) -> bool:
        try:
            self.invoices = invoices_api.list_invoices(self.client)
        except TransportError as e:
            logger.error("invoices_load_failed", error=str(e))
            self.error = "Erreur lors du chargement des factures"
            return False
        finally:
            self.is_loading = False
        return True

    def reload_payments(self) -> bool:
        try:
            self.payments = payments_api.list_payments(self.client)
        except TransportError as e:
            logger.error("payments_load_failed", error=str(e))
            self.error = "Erreur lors du chargement des paiements"
            return False
        return self.load_invoices()

    def _clear(self) -> None:
        self.payments = []
        self.reservations = []
        self.events = []
        self.subscriptions = []
        self.invoices = []

    # -------------------------------------------------------------------------
    # Derived tables
    # -------------------------------------------------------------------------

    def pending_payments(self) -> List[Payment]:
        return [p for p in self.payments if p.status is PaymentStatus.PENDING]

    def validated_payments(self) -> List[Payment]:
        return [p for p in self.payments if p.status is PaymentStatus.VALIDATED]

    def unpaid_reservations(self) -> List[Reservation]:
        """Reservations that no validated payment points at."""
        paid = {
            p.reservation_id
            for p in self.payments
            if p.type is PaymentType.RESERVATION and p.status is PaymentStatus.VALIDATED
        }
        return [r for r in self.reservations if r.id not in paid]

    def payment_info(self, payment: Payment) -> str:
        return PAYMENT_LABELS[payment.type](self, payment)

    def resolve_counterpart(self, payment: Payment) -> Counterpart:
        """
        Find who an invoice for `payment` should be sent to.

        Raises:
            MissingReferenceError: If the payment's reservation, subscription
                or event is not set or not among the loaded records.
            MissingRecipientError: If the reservation or subscription has no email.
        """
        return COUNTERPART_RESOLVERS[payment.type](self, payment)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _payment(self, payment_id: int) -> Optional[Payment]:
        payment = _find(self.payments, payment_id)
        if payment is None:
            logger.warning("payment_not_loaded", payment_id=payment_id)
            self.notifier.error("Paiement introuvable")
        return payment

    def _counterpart_or_notify(self, payment: Payment) -> Optional[Counterpart]:
        try:
            counterpart = self.resolve_counterpart(payment)
        except MissingReferenceError as e:
            logger.error(
                "payment_reference_missing",
                payment_id=e.payment_id,
                entity=e.entity,
                ref_id=e.ref_id,
            )
            self.notifier.error(missing_reference_message(e))
            return None
        except MissingRecipientError as e:
            logger.error(
                "payment_recipient_missing",
                payment_id=e.payment_id,
                entity=e.entity,
                record_id=e.record_id,
            )
            self.notifier.error(NO_EMAIL_MESSAGES.get(e.entity, str(e)))
            return None

        if counterpart.warning:
            self.notifier.warning(counterpart.warning)
        return counterpart

    def _invoice_for(self, payment_id: int, email: str) -> Invoice:
        return Invoice(
            payment_id=payment_id,
            pdf_url=self.client.url_for(invoices_api.invoice_pdf_path(payment_id)),
            recipient_email=email,
            sent_at=local_now(),
        )

    def prepare_invoice(self, payment_id: int) -> Optional[Counterpart]:
        """Resolve the recipient before the send-invoice dialog opens."""
        payment = self._payment(payment_id)
        if payment is None:
            return None
        counterpart = self._counterpart_or_notify(payment)
        if counterpart is not None and not counterpart.warning:
            self.notifier.info(f"Email du utilisateur utilisé: {counterpart.email}")
        return counterpart

    def send_invoice(self, payment_id: int, email: str) -> Optional[Invoice]:
        if self._payment(payment_id) is None:
            return None
        if not email:
            self.notifier.error("Aucun email spécifié pour l'envoi")
            return None

        try:
            created = invoices_api.create_invoice(self.client, self._invoice_for(payment_id, email))
        except TransportError as e:
            logger.error("invoice_send_failed", payment_id=payment_id, error=str(e))
            self.notifier.error("Erreur lors de l'envoi de la facture")
            return None

        invoices_generated.inc()
        logger.info("invoice_sent", invoice_id=created.id, payment_id=payment_id)
        self.notifier.success(f"Facture envoyée à {email}")
        self.load_invoices()
        return created

    def generate_invoice(self, payment_id: int) -> Optional[Invoice]:
        """
        Create an invoice addressed to the payment's counterpart and download its PDF.

        A missing reference or a failed create is notified and aborts this
        action only; the loaded collections are left untouched.

        Returns:
            The created invoice, or None if it was not created.
        """
        payment = self._payment(payment_id)
        if payment is None:
            return None
        counterpart = self._counterpart_or_notify(payment)
        if counterpart is None:
            return None

        self.is_loading = True
        try:
            created = invoices_api.create_invoice(
                self.client, self._invoice_for(payment_id, counterpart.email)
            )
        except TransportError as e:
            logger.error("invoice_create_failed", payment_id=payment_id, error=str(e))
            self.notifier.error("Erreur lors de la création de la facture")
            self.is_loading = False
            return None

        invoices_generated.inc()
        logger.info(
            "invoice_generated",
            invoice_id=created.id,
            payment_id=payment_id,
            recipient=counterpart.email,
        )
        self.notifier.success("Facture générée avec succès")
        if created.id is not None:
            self.download_invoice(created.id)
        self.load_invoices()
        return created

    def download_invoice(self, invoice_id: int) -> Optional[Path]:
        """
        Save an invoice PDF as `facture_<id>.pdf` in the download directory.

        On a 401 the session has already been cleared by the client; the
        view asks to be sent back to sign-in.
        """
        if self.client.session.token is None:
            self.notifier.error("Veuillez vous reconnecter", title="Session expirée")
            self.client.session.clear()
            self.redirect_to = SIGNIN_ROUTE
            return None

        try:
            content = invoices_api.download_invoice_pdf(self.client, invoice_id)
        except SessionExpiredError as e:
            self.notifier.error("Session expirée, veuillez vous reconnecter")
            self.redirect_to = e.redirect
            return None
        except TransportError as e:
            logger.error("invoice_download_failed", invoice_id=invoice_id, error=str(e))
            self.notifier.error("Impossible de télécharger la facture")
            return None

        self.download_dir.mkdir(parents=True, exist_ok=True)
        target = self.download_dir / f"facture_{invoice_id}.pdf"
        target.write_bytes(content)
        logger.info("invoice_downloaded", invoice_id=invoice_id, path=str(target), size=len(content))
        return target

    def validate_payment(self, payment_id: int) -> bool:
        payment = _find(self.payments, payment_id)
        if payment is None or payment.id is None:
            return False

        updated = payment.model_copy(update={"status": PaymentStatus.VALIDATED})
        try:
            payments_api.update_payment(self.client, payment.id, updated)
        except TransportError as e:
            logger.error("payment_validation_failed", payment_id=payment_id, error=str(e))
            self.error = "Erreur lors de la validation du paiement"
            self.notifier.error(self.error)
            return False

        logger.info("payment_validated", payment_id=payment_id, amount=payment.amount)
        self.notifier.success("Paiement validé avec succès")
        self.reload_payments()
        return True

    def delete_invoice(self, invoice_id: int) -> bool:
        try:
            invoices_api.delete_invoice(self.client, invoice_id)
        except TransportError as e:
            logger.error("invoice_delete_failed", invoice_id=invoice_id, error=str(e))
            self.error = "Erreur lors de la suppression de la facture"
            self.notifier.error(self.error)
            return False

        logger.info("invoice_deleted", invoice_id=invoice_id)
        self.notifier.success("Facture supprimée avec succès")
        self.load_invoices()
        return True
