"""
Private-space booking: conflict validation and reservation submission.

The overlap check is advisory; the backend remains the authority and may
still reject a request that passes here.

Unavailability windows use a boundary-inclusive test while reservations
use a boundary-exclusive one. A request that starts exactly when another
reservation ends is accepted; one that starts exactly when an
unavailability window ends is rejected. Both predicates are pinned by
tests and must not be unified without confirming the intended rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

import structlog

from cowork_booking.errors import (
    BookingValidationError,
    ConflictKind,
    ReservationConflictError,
    TransportError,
)
from cowork_booking.metrics import booking_conflicts
from cowork_booking.network.client import ApiClient
from cowork_booking.network.join import fork_join
from cowork_booking.notifications import Notifier
from cowork_booking.resources import reservations as reservations_api
from cowork_booking.resources.unavailability import list_unavailabilities_for_space
from cowork_booking.schemas.reservations import (
    Reservation,
    ReservationStatus,
    UnavailabilityWindow,
)
from cowork_booking.schemas.spaces import Space, SpaceType
from cowork_booking.schemas.users import UserProfile
from cowork_booking.services.availability import DateLike, DayState, day_state

logger = structlog.get_logger(__name__)

# Private spaces are priced per day; an hour is an eighth of a day
HOURS_PER_DAY = 8

CONFLICT_MESSAGES: Dict[ConflictKind, str] = {
    ConflictKind.UNAVAILABLE: "Espace indisponible pour la plage horaire sélectionnée",
    ConflictKind.RESERVED: "Cet espace n'est pas disponible pour la plage horaire sélectionnée",
}


@dataclass(frozen=True)
class BookingOk:
    ok: bool = True


@dataclass(frozen=True)
class BookingConflict:
    kind: ConflictKind
    conflicting_id: Optional[int] = None
    ok: bool = False

    @property
    def message(self) -> str:
        return CONFLICT_MESSAGES[self.kind]


BookingResult = Union[BookingOk, BookingConflict]

STATUS_MESSAGES: Dict[ReservationStatus, str] = {
    ReservationStatus.CONFIRMED: "Réservation validée avec succès",
    ReservationStatus.CANCELLED: "Réservation annulée avec succès",
}


def overlaps_unavailability(window: UnavailabilityWindow, start: datetime, end: datetime) -> bool:
    return window.start <= end and window.end >= start


def overlaps_reservation(other: Reservation, start: datetime, end: datetime) -> bool:
    return start < other.end and end > other.start


def validate(
    space: Space,
    start: datetime,
    end: datetime,
    unavailabilities: Iterable[UnavailabilityWindow],
    reservations: Iterable[Reservation],
) -> BookingResult:
    """
    Check a requested interval against the space's windows and reservations.

    Unavailability windows are checked first, so an overlapping window is
    reported even when a reservation also overlaps.
    """
    for window in unavailabilities:
        if window.space_id == space.id and overlaps_unavailability(window, start, end):
            return BookingConflict(ConflictKind.UNAVAILABLE, window.id)

    for other in reservations:
        if other.space_id == space.id and overlaps_reservation(other, start, end):
            return BookingConflict(ConflictKind.RESERVED, other.id)

    return BookingOk()


@dataclass(frozen=True)
class BookingRequest:
    """A booking form whose required fields are all present."""

    user: UserProfile
    user_id: int
    space: Space
    space_id: int
    start: datetime
    end: datetime


def check_booking_request(
    space: Optional[Space],
    user: Optional[UserProfile],
    start: Optional[datetime],
    end: Optional[datetime],
) -> BookingRequest:
    """
    Form-level checks, run before anything touches the network.

    Raises:
        BookingValidationError: If a field is missing or the range is empty.
    """
    if space is None or space.id is None or user is None or user.id is None:
        raise BookingValidationError("Veuillez remplir tous les champs requis")
    if start is None or end is None:
        raise BookingValidationError("Veuillez remplir tous les champs requis")
    if end <= start:
        raise BookingValidationError("L'heure de fin doit être après l'heure de début")
    return BookingRequest(user, user.id, space, space.id, start, end)


def estimate_price(space: Space, start: datetime, end: datetime) -> float:
    hours = max(0.0, (end - start).total_seconds() / 3600)
    return hours * (space.daily_price or 0) / HOURS_PER_DAY


def build_reservation(request: BookingRequest) -> Reservation:
    user = request.user
    return Reservation(
        user_id=request.user_id,
        user_first_name=user.first_name or "",
        user_last_name=user.last_name or "",
        user_email=user.email or "",
        user_phone=user.phone or "",
        space_id=request.space_id,
        space_name=request.space.name,
        space_type=SpaceType.PRIVATE,
        start=request.start,
        end=request.end,
        amount=estimate_price(request.space, request.start, request.end),
        status=ReservationStatus.PENDING,
        payment_validated=False,
    )


def book_space(
    client: ApiClient,
    user: Optional[UserProfile],
    space: Optional[Space],
    start: Optional[datetime],
    end: Optional[datetime],
    unavailabilities: Iterable[UnavailabilityWindow],
    reservations: Iterable[Reservation],
) -> Reservation:
    """
    Validate a booking request and submit it as a PENDING reservation.

    Raises:
        BookingValidationError: If the form is incomplete or the range is empty.
        ReservationConflictError: If the interval overlaps a window or reservation.
        TransportError: If the backend rejects the create call.
    """
    request = check_booking_request(space, user, start, end)
    result = validate(request.space, request.start, request.end, unavailabilities, reservations)
    if isinstance(result, BookingConflict):
        booking_conflicts.labels(kind=result.kind.value).inc()
        logger.info(
            "booking_conflict",
            space_id=request.space_id,
            kind=result.kind.value,
            conflicting_id=result.conflicting_id,
        )
        raise ReservationConflictError(result.kind, result.message)

    created = reservations_api.create_reservation(client, build_reservation(request))
    logger.info(
        "reservation_created",
        reservation_id=created.id,
        space_id=created.space_id,
        user_id=created.user_id,
    )
    return created


class BookingDesk:
    """
    Booking state for one private space, as shown on its detail screen.

    Holds the space's unavailability windows, all of its reservations and
    the current user's reservations on it.
    """

    def __init__(self, client: ApiClient, notifier: Notifier):
        self.client = client
        self.notifier = notifier
        self.unavailabilities: List[UnavailabilityWindow] = []
        self.space_reservations: List[Reservation] = []
        self.user_reservations: List[Reservation] = []
        self.booking_error: str = ""

    def load(self, space_id: int, user_id: Optional[int] = None) -> bool:
        calls = {
            "unavailabilities": lambda: list_unavailabilities_for_space(self.client, space_id),
            "space_reservations": lambda: reservations_api.list_reservations_by_space(
                self.client, space_id
            ),
        }
        if user_id is not None:
            calls["user_reservations"] = lambda: reservations_api.list_reservations_by_user(
                self.client, user_id
            )

        try:
            fetched = fork_join(calls)
        except TransportError as e:
            logger.error("booking_context_load_failed", space_id=space_id, error=str(e))
            self.notifier.error("Erreur lors du chargement des indisponibilités")
            return False

        self.unavailabilities = fetched["unavailabilities"]
        self.space_reservations = fetched["space_reservations"]
        self.user_reservations = [
            r for r in fetched.get("user_reservations", []) if r.space_id == space_id
        ]
        return True

    def day_state(self, space: Space, day: DateLike, current_user_id: Optional[int]) -> DayState:
        return day_state(
            space,
            day,
            self.unavailabilities,
            self.user_reservations,
            self.space_reservations,
            current_user_id,
        )

    def book(
        self,
        user: Optional[UserProfile],
        space: Optional[Space],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> Optional[Reservation]:
        """
        Validate and submit a reservation request.

        Returns:
            The created reservation, or None when the request was rejected
            locally or by the backend. `booking_error` holds the reason.
        """
        self.booking_error = ""
        try:
            request = check_booking_request(space, user, start, end)
        except BookingValidationError as e:
            self.booking_error = str(e)
            self.notifier.warning(self.booking_error)
            return None

        try:
            created = book_space(
                self.client,
                request.user,
                request.space,
                request.start,
                request.end,
                self.unavailabilities,
                self.space_reservations,
            )
        except ReservationConflictError as e:
            self.booking_error = str(e)
            self.notifier.error(self.booking_error)
            return None
        except TransportError as e:
            logger.error("reservation_create_failed", space_id=request.space_id, error=str(e))
            self.booking_error = "Erreur lors de la réservation"
            self.notifier.error(self.booking_error)
            return None

        self.notifier.success("Réservation effectuée avec succès")
        self.load(request.space_id, request.user_id)
        return created


def set_reservation_status(
    client: ApiClient,
    notifier: Notifier,
    reservation: Reservation,
    status: ReservationStatus,
) -> Optional[Reservation]:
    """
    Confirm or cancel a reservation (receptionist/admin action).

    The full record is sent back with the new status; the last write wins.
    """
    if status is ReservationStatus.PENDING or reservation.id is None:
        raise BookingValidationError("Statut de réservation invalide")

    updated = reservation.model_copy(update={"status": status})
    try:
        saved = reservations_api.update_reservation(client, reservation.id, updated)
    except TransportError as e:
        logger.error("reservation_status_failed", reservation_id=reservation.id, error=str(e))
        notifier.error("Erreur lors de la mise à jour du statut")
        return None

    logger.info("reservation_status_changed", reservation_id=reservation.id, status=status.value)
    notifier.success(STATUS_MESSAGES[status])
    return saved
