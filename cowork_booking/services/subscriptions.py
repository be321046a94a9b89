"""Open-space subscription lifecycle: plan dates, pricing, subscribe/renew/cancel."""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

import structlog

from cowork_booking.config import MONTHLY_FALLBACK_PRICE, YEARLY_FALLBACK_PRICE
from cowork_booking.errors import BookingValidationError, TransportError
from cowork_booking.network.client import ApiClient
from cowork_booking.notifications import Notifier
from cowork_booking.resources import subscriptions as subscriptions_api
from cowork_booking.schemas.auth import AuthResponse
from cowork_booking.schemas.spaces import Space, SpaceType
from cowork_booking.schemas.subscriptions import Subscription, SubscriptionType
from cowork_booking.utils.datetime import local_now

logger = structlog.get_logger(__name__)

END_OF_DAY = time(23, 59, 59, 999000)

FALLBACK_PRICES: Dict[SubscriptionType, float] = {
    SubscriptionType.MONTHLY: MONTHLY_FALLBACK_PRICE,
    SubscriptionType.YEARLY: YEARLY_FALLBACK_PRICE,
}


def _day_zero(year: int, month: int) -> date:
    """Day 0 of a month, i.e. the last day of the month before it."""
    return date(year, month, 1) - timedelta(days=1)


def compute_end_date(sub_type: SubscriptionType, start: datetime) -> datetime:
    """
    End of a plan started at `start`, at 23:59:59.999 local time.

    MENSUEL moves to the next month keeping the day of month (overflowing
    into the month after when that day does not exist), then takes day 0.
    For most start dates that is the last day of the start month itself:
    2024-01-15 ends 2024-01-31; 2024-01-31 overflows to March and ends
    2024-02-29.

    ANNUEL takes day 0 of January of the following year, i.e. December 31
    of the start year: 2024-03-10 ends 2024-12-31.
    """
    if sub_type is SubscriptionType.MONTHLY:
        year_carry, month_index = divmod(start.month, 12)
        year, month = start.year + year_carry, month_index + 1
        if start.day > monthrange(year, month)[1]:
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        end_day = _day_zero(year, month)
    else:
        end_day = _day_zero(start.year + 1, 1)
    return datetime.combine(end_day, END_OF_DAY)


def has_active_subscription(client: ApiClient, user_id: int) -> bool:
    """
    True iff the backend lists any subscription for the user.

    The end date is not compared with now; an expired record still counts.
    """
    return len(subscriptions_api.list_subscriptions_by_user(client, user_id)) > 0


class SubscriptionManager:
    """
    Subscription state for one user, as shown on the open-space screen.

    `subscriptions` only changes after a backend call succeeds; a failed
    create or delete leaves it as it was and notifies the user.
    """

    def __init__(self, client: ApiClient, notifier: Notifier):
        self.client = client
        self.notifier = notifier
        self.subscriptions: List[Subscription] = []

    @property
    def current(self) -> Optional[Subscription]:
        """The first subscription in the fetched list is treated as the active one."""
        return self.subscriptions[0] if self.subscriptions else None

    def can_reserve(self) -> bool:
        return self.current is not None

    def reload(self, user_id: int) -> List[Subscription]:
        try:
            self.subscriptions = subscriptions_api.list_subscriptions_by_user(self.client, user_id)
        except TransportError as e:
            logger.error("subscriptions_load_failed", user_id=user_id, error=str(e))
            self.notifier.error("Erreur lors du chargement des abonnements")
        return self.subscriptions

    def resolve_price(self, plan_type: SubscriptionType) -> float:
        """
        Price of a plan from the catalog, matched on billing cycle.

        Falls back to FALLBACK_PRICES when the catalog is empty, has no
        matching plan, or cannot be fetched.
        """
        try:
            plans = subscriptions_api.list_plans(self.client)
        except TransportError as e:
            logger.warning("plan_catalog_unavailable", error=str(e))
            plans = []

        for plan in plans:
            if plan.billing_cycle == plan_type.billing_cycle:
                return plan.price

        logger.info("plan_price_fallback", plan_type=plan_type.value)
        return FALLBACK_PRICES[plan_type]

    def _build(
        self, plan_type: SubscriptionType, user_id: int, email: Optional[str], space: Space
    ) -> Subscription:
        if space.type is not SpaceType.OPEN:
            raise BookingValidationError("Les abonnements concernent uniquement les espaces ouverts")

        start = local_now()
        return Subscription(
            type=plan_type,
            price=self.resolve_price(plan_type),
            start=start,
            end=compute_end_date(plan_type, start),
            user_id=user_id,
            user_email=email,
            open_space_id=space.id,
            open_space_name=space.name,
        )

    def subscribe(
        self, plan_type: SubscriptionType, user: AuthResponse, space: Space
    ) -> Optional[Subscription]:
        """
        Create a subscription starting now and reload the user's list.

        Returns:
            The created subscription, or None if the backend rejected it.
        """
        if user.user_id is None:
            raise BookingValidationError("Veuillez vous connecter pour vous abonner")
        user_id = user.user_id
        subscription = self._build(plan_type, user_id, user.email, space)
        try:
            created = subscriptions_api.create_subscription(self.client, subscription)
        except TransportError as e:
            logger.error("subscription_create_failed", user_id=user_id, error=str(e))
            self.notifier.error("Erreur lors de la création de l'abonnement")
            return None

        logger.info(
            "subscription_created",
            subscription_id=created.id,
            user_id=user_id,
            plan_type=plan_type.value,
            price=created.price,
        )
        self.notifier.success("Abonnement créé avec succès")
        self.reload(user_id)
        return created

    def renew(self, user_id: int) -> Optional[Subscription]:
        """Restart the current subscription's plan from now, at the catalog price."""
        current = self.current
        if current is None or current.id is None:
            self.notifier.warning("Aucun abonnement à renouveler")
            return None

        start = local_now()
        renewed = current.model_copy(
            update={
                "price": self.resolve_price(current.type),
                "start": start,
                "end": compute_end_date(current.type, start),
            }
        )
        try:
            updated = subscriptions_api.update_subscription(self.client, current.id, renewed)
        except TransportError as e:
            logger.error("subscription_renew_failed", subscription_id=current.id, error=str(e))
            self.notifier.error("Erreur lors du renouvellement de l'abonnement")
            return None

        logger.info("subscription_renewed", subscription_id=current.id, end=str(updated.end))
        self.notifier.success("Abonnement renouvelé avec succès")
        self.reload(user_id)
        return updated

    def unsubscribe(self, subscription_id: int, user_id: int) -> bool:
        """Delete a subscription unconditionally; no refund or pro-rating."""
        try:
            subscriptions_api.delete_subscription(self.client, subscription_id)
        except TransportError as e:
            logger.error("subscription_delete_failed", subscription_id=subscription_id, error=str(e))
            self.notifier.error("Erreur lors de la suppression de l'abonnement")
            return False

        logger.info("subscription_deleted", subscription_id=subscription_id, user_id=user_id)
        self.notifier.success("Abonnement supprimé avec succès")
        self.reload(user_id)
        return True
