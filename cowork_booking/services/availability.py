"""
Blocked-date calculation for a space's booking calendar.

A date is blocked when it is in the past, or falls inside any declared
unavailability window or existing reservation for the space. Intervals are
expanded to whole calendar days, inclusive of both ends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Set, Union

import structlog

from cowork_booking.errors import TransportError
from cowork_booking.network.client import ApiClient
from cowork_booking.network.join import fork_join
from cowork_booking.resources.reservations import list_reservations_by_space
from cowork_booking.resources.unavailability import list_unavailabilities_for_space
from cowork_booking.schemas.reservations import Reservation, UnavailabilityWindow
from cowork_booking.schemas.spaces import Space
from cowork_booking.utils.datetime import local_today

logger = structlog.get_logger(__name__)

DateLike = Union[date, datetime]


def as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def expand_days(start: DateLike, end: DateLike) -> Set[date]:
    """
    Expand an interval into the calendar days it touches.

    Steps one calendar day at a time (not 24 hours), so DST changes never
    skip or repeat a day. `start` after `end` yields an empty set.

    Example:
        >>> sorted(expand_days(datetime(2024, 3, 30, 22), datetime(2024, 4, 1, 2)))
        [datetime.date(2024, 3, 30), datetime.date(2024, 3, 31), datetime.date(2024, 4, 1)]
    """
    current, last = as_date(start), as_date(end)
    days: Set[date] = set()
    while current <= last:
        days.add(current)
        current += timedelta(days=1)
    return days


@dataclass(frozen=True)
class BlockedDates:
    unavailable: FrozenSet[date] = field(default_factory=frozenset)
    reserved: FrozenSet[date] = field(default_factory=frozenset)

    def is_date_blocked(self, day: DateLike, today: Optional[date] = None) -> bool:
        """True if `day` is before today, unavailable, or already reserved."""
        day = as_date(day)
        if day < (today or local_today()):
            return True
        return day in self.unavailable or day in self.reserved

    def __call__(self, day: DateLike) -> bool:
        return self.is_date_blocked(day)


def build_blocked_dates(
    unavailabilities: Iterable[UnavailabilityWindow],
    reservations: Iterable[Reservation],
) -> BlockedDates:
    unavailable: Set[date] = set()
    for window in unavailabilities:
        unavailable |= expand_days(window.start, window.end)

    reserved: Set[date] = set()
    for reservation in reservations:
        reserved |= expand_days(reservation.start, reservation.end)

    return BlockedDates(unavailable=frozenset(unavailable), reserved=frozenset(reserved))


def load_blocked_dates(client: ApiClient, space_id: int) -> BlockedDates:
    """
    Fetch a space's unavailability windows and reservations and build its predicate.

    Fails open: if either fetch fails the error is logged and only past
    dates are blocked.
    """
    try:
        fetched = fork_join(
            {
                "unavailabilities": lambda: list_unavailabilities_for_space(client, space_id),
                "reservations": lambda: list_reservations_by_space(client, space_id),
            }
        )
    except TransportError as e:
        logger.error("blocked_dates_fetch_failed", space_id=space_id, error=str(e))
        return BlockedDates()

    blocked = build_blocked_dates(fetched["unavailabilities"], fetched["reservations"])
    logger.debug(
        "blocked_dates_loaded",
        space_id=space_id,
        unavailable_days=len(blocked.unavailable),
        reserved_days=len(blocked.reserved),
    )
    return blocked


class DayReason(str, Enum):
    UNAVAILABLE = "indisponible"
    RESERVED_BY_USER = "reserved-by-user"
    RESERVED_BY_OTHERS = "reserved-by-others"
    INACTIVE = "inactive"


DAY_TOOLTIPS = {
    DayReason.UNAVAILABLE: "Espace indisponible à cette date",
    DayReason.RESERVED_BY_USER: "Vous avez déjà une réservation pour cet espace à cette date",
    DayReason.RESERVED_BY_OTHERS: "Espace déjà réservé par une autre personne",
    DayReason.INACTIVE: "Espace actuellement indisponible",
}


@dataclass(frozen=True)
class DayState:
    disabled: bool
    reason: Optional[DayReason] = None

    @property
    def tooltip(self) -> str:
        if not self.disabled:
            return ""
        return DAY_TOOLTIPS[self.reason] if self.reason else "Date non disponible"


def day_state(
    space: Space,
    day: DateLike,
    unavailabilities: Iterable[UnavailabilityWindow],
    user_reservations: Iterable[Reservation],
    all_reservations: Iterable[Reservation],
    current_user_id: Optional[int],
) -> DayState:
    """
    Picker state for one day of a private space's calendar.

    Unavailability wins over the user's own reservation, which wins over
    somebody else's. Reservations are matched on their start day only.
    """
    day = as_date(day)

    if any(as_date(w.start) <= day <= as_date(w.end) for w in unavailabilities):
        return DayState(True, DayReason.UNAVAILABLE)
    if any(as_date(r.start) == day for r in user_reservations):
        return DayState(True, DayReason.RESERVED_BY_USER)
    if any(as_date(r.start) == day and r.user_id != current_user_id for r in all_reservations):
        return DayState(True, DayReason.RESERVED_BY_OTHERS)
    if not space.is_active:
        return DayState(True, DayReason.INACTIVE)
    return DayState(False)
