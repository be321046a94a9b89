"""
Unit tests for services/subscriptions.py plan dates, pricing and lifecycle.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable
from unittest.mock import Mock, patch

import pytest

from cowork_booking.errors import ApiError, BookingValidationError, TransportError
from cowork_booking.network.client import ApiClient
from cowork_booking.notifications import Notifier
from cowork_booking.schemas.auth import AuthResponse
from cowork_booking.schemas.spaces import Space, SpaceType
from cowork_booking.schemas.subscriptions import Subscription, SubscriptionPlan, SubscriptionType
from cowork_booking.services.subscriptions import (
    SubscriptionManager,
    compute_end_date,
    has_active_subscription,
)

USER = AuthResponse(token="t", user_id=7, email="alice@example.com", role="COWORKER")
OPEN_SPACE = Space(id=3, name="Open Space Nord", type=SpaceType.OPEN)


def _subscription(sub_id: int, sub_type: SubscriptionType = SubscriptionType.MONTHLY) -> Subscription:
    return Subscription(
        id=sub_id,
        type=sub_type,
        price=650,
        start=datetime(2024, 1, 1),
        end=datetime(2024, 1, 31, 23, 59, 59, 999000),
        user_id=7,
    )


@pytest.mark.unit
def test_compute_end_date_monthly_mid_month() -> None:
    """Test the literal month+1 then day 0 rollover lands on the start month's last day."""
    assert compute_end_date(SubscriptionType.MONTHLY, datetime(2024, 1, 15, 10, 30)) == datetime(
        2024, 1, 31, 23, 59, 59, 999000
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    "start, expected",
    [
        # Jan 31 + 1 month overflows into March; day 0 of March is Feb 29
        (datetime(2024, 1, 31), datetime(2024, 2, 29, 23, 59, 59, 999000)),
        (datetime(2023, 1, 31), datetime(2023, 2, 28, 23, 59, 59, 999000)),
        (datetime(2024, 12, 10), datetime(2024, 12, 31, 23, 59, 59, 999000)),
        (datetime(2024, 11, 30), datetime(2024, 11, 30, 23, 59, 59, 999000)),
    ],
)
def test_compute_end_date_monthly_rollover(start: datetime, expected: datetime) -> None:
    """Test month-end and year-end rollovers of the monthly end date."""
    assert compute_end_date(SubscriptionType.MONTHLY, start) == expected


@pytest.mark.unit
def test_compute_end_date_yearly() -> None:
    """Test that a yearly plan ends on December 31 of the start year."""
    assert compute_end_date(SubscriptionType.YEARLY, datetime(2024, 3, 10)) == datetime(
        2024, 12, 31, 23, 59, 59, 999000
    )


@pytest.mark.unit
@patch("cowork_booking.resources.subscriptions.list_subscriptions_by_user")
def test_has_active_subscription_ignores_end_date(mock_list: Mock) -> None:
    """Test that an expired subscription still counts as active."""
    expired = _subscription(1)
    expired.end = datetime(2000, 1, 31)
    mock_list.return_value = [expired]

    assert has_active_subscription(Mock(), 7) is True

    mock_list.return_value = []
    assert has_active_subscription(Mock(), 7) is False


@pytest.mark.unit
def test_current_is_first_subscription(notifier: Notifier) -> None:
    """Test that the first fetched subscription is treated as the active one."""
    manager = SubscriptionManager(Mock(), notifier)
    manager.subscriptions = [_subscription(5, SubscriptionType.YEARLY), _subscription(4)]

    assert manager.current is not None
    assert manager.current.id == 5
    assert manager.can_reserve() is True


@pytest.mark.unit
@patch("cowork_booking.resources.subscriptions.list_plans")
def test_resolve_price_from_catalog(mock_plans: Mock, notifier: Notifier) -> None:
    """Test that the catalog price is matched on billing cycle."""
    mock_plans.return_value = [
        SubscriptionPlan(billing_cycle="YEARLY", price=6500),
        SubscriptionPlan(billing_cycle="MONTHLY", price=600),
    ]
    manager = SubscriptionManager(Mock(), notifier)

    assert manager.resolve_price(SubscriptionType.MONTHLY) == 600
    assert manager.resolve_price(SubscriptionType.YEARLY) == 6500


@pytest.mark.unit
@pytest.mark.parametrize(
    "plans, side_effect",
    [([], None), ([SubscriptionPlan(billing_cycle="WEEKLY", price=1)], None), (None, TransportError("down"))],
)
@patch("cowork_booking.resources.subscriptions.list_plans")
def test_resolve_price_fallbacks(mock_plans: Mock, plans, side_effect, notifier: Notifier) -> None:
    """Test the 650/7000 fallback for an empty, unmatched or unreachable catalog."""
    mock_plans.return_value = plans
    mock_plans.side_effect = side_effect
    manager = SubscriptionManager(Mock(), notifier)

    assert manager.resolve_price(SubscriptionType.MONTHLY) == 650
    assert manager.resolve_price(SubscriptionType.YEARLY) == 7000


@pytest.mark.unit
@patch("cowork_booking.services.subscriptions.local_now")
@patch("cowork_booking.resources.subscriptions.list_subscriptions_by_user")
@patch("cowork_booking.resources.subscriptions.create_subscription")
@patch("cowork_booking.resources.subscriptions.list_plans")
def test_subscribe_builds_and_reloads(
    mock_plans: Mock,
    mock_create: Mock,
    mock_list: Mock,
    mock_now: Mock,
    notifier: Notifier,
) -> None:
    """Test that subscribe submits a plan starting now and reloads on success."""
    mock_plans.return_value = []
    mock_now.return_value = datetime(2024, 1, 15, 9, 0)
    mock_create.side_effect = lambda client, sub: sub.model_copy(update={"id": 11})
    mock_list.return_value = [_subscription(11)]
    manager = SubscriptionManager(Mock(), notifier)

    created = manager.subscribe(SubscriptionType.MONTHLY, USER, OPEN_SPACE)

    assert created is not None and created.id == 11
    sent = mock_create.call_args[0][1]
    assert sent.price == 650
    assert sent.start == datetime(2024, 1, 15, 9, 0)
    assert sent.end == datetime(2024, 1, 31, 23, 59, 59, 999000)
    assert sent.open_space_id == 3
    assert sent.to_wire()["espaceOuvertId"] == 3
    mock_list.assert_called_once()
    assert [s.id for s in manager.subscriptions] == [11]
    assert notifier.last().level == "success"


@pytest.mark.unit
@patch("cowork_booking.resources.subscriptions.list_subscriptions_by_user")
@patch("cowork_booking.resources.subscriptions.create_subscription")
@patch("cowork_booking.resources.subscriptions.list_plans")
def test_subscribe_failure_keeps_state(
    mock_plans: Mock, mock_create: Mock, mock_list: Mock, notifier: Notifier
) -> None:
    """Test that a rejected create notifies and leaves the local list untouched."""
    mock_plans.return_value = []
    mock_create.side_effect = ApiError(400, "already subscribed")
    manager = SubscriptionManager(Mock(), notifier)
    previous = [_subscription(1)]
    manager.subscriptions = previous

    assert manager.subscribe(SubscriptionType.YEARLY, USER, OPEN_SPACE) is None

    assert manager.subscriptions is previous
    mock_list.assert_not_called()
    assert notifier.last().level == "error"


@pytest.mark.unit
def test_subscribe_rejects_private_space(notifier: Notifier) -> None:
    """Test that subscriptions are only built for open spaces."""
    manager = SubscriptionManager(Mock(), notifier)
    private = Space(id=9, name="Bureau 1", type=SpaceType.PRIVATE)

    with pytest.raises(BookingValidationError):
        manager.subscribe(SubscriptionType.MONTHLY, USER, private)


@pytest.mark.unit
@patch("cowork_booking.resources.subscriptions.list_subscriptions_by_user")
@patch("cowork_booking.resources.subscriptions.delete_subscription")
def test_unsubscribe_deletes_and_reloads(
    mock_delete: Mock, mock_list: Mock, notifier: Notifier
) -> None:
    """Test that unsubscribe deletes unconditionally, then reloads."""
    mock_list.return_value = []
    client = Mock()
    manager = SubscriptionManager(client, notifier)
    manager.subscriptions = [_subscription(4)]

    assert manager.unsubscribe(4, 7) is True

    mock_delete.assert_called_once_with(client, 4)
    assert manager.subscriptions == []
    assert manager.can_reserve() is False


@pytest.mark.unit
@patch("cowork_booking.resources.subscriptions.list_subscriptions_by_user")
@patch("cowork_booking.resources.subscriptions.delete_subscription")
def test_unsubscribe_failure_keeps_state(
    mock_delete: Mock, mock_list: Mock, notifier: Notifier
) -> None:
    """Test that a failed delete notifies and skips the reload."""
    mock_delete.side_effect = TransportError("timeout")
    manager = SubscriptionManager(Mock(), notifier)
    manager.subscriptions = [_subscription(4)]

    assert manager.unsubscribe(4, 7) is False

    assert [s.id for s in manager.subscriptions] == [4]
    mock_list.assert_not_called()
    assert notifier.last().message == "Erreur lors de la suppression de l'abonnement"


@pytest.mark.unit
@patch("cowork_booking.services.subscriptions.local_now")
@patch("cowork_booking.resources.subscriptions.list_subscriptions_by_user")
@patch("cowork_booking.resources.subscriptions.update_subscription")
@patch("cowork_booking.resources.subscriptions.list_plans")
def test_renew_restarts_current_plan_from_now(
    mock_plans: Mock,
    mock_update: Mock,
    mock_list: Mock,
    mock_now: Mock,
    notifier: Notifier,
) -> None:
    """Test that renewing sends new dates from now at the catalog price, then reloads."""
    mock_plans.return_value = [
        SubscriptionPlan(name="Mensuel", price=700, billing_cycle="MONTHLY"),
    ]
    mock_now.return_value = datetime(2024, 3, 10, 8, 0)
    mock_update.side_effect = lambda client, sub_id, sub: sub
    manager = SubscriptionManager(Mock(), notifier)
    manager.subscriptions = [_subscription(4)]
    mock_list.return_value = [_subscription(4)]

    renewed = manager.renew(7)

    assert renewed is not None
    sub_id, sent = mock_update.call_args[0][1:]
    assert sub_id == 4
    assert sent.price == 700
    assert sent.start == datetime(2024, 3, 10, 8, 0)
    assert sent.end == datetime(2024, 3, 31, 23, 59, 59, 999000)
    mock_list.assert_called_once_with(manager.client, 7)
    assert notifier.last().message == "Abonnement renouvelé avec succès"


@pytest.mark.unit
@patch("cowork_booking.resources.subscriptions.list_subscriptions_by_user")
@patch("cowork_booking.resources.subscriptions.update_subscription")
@patch("cowork_booking.resources.subscriptions.list_plans")
def test_renew_failure_keeps_state(
    mock_plans: Mock, mock_update: Mock, mock_list: Mock, notifier: Notifier
) -> None:
    """Test that a rejected renewal notifies and leaves the local list untouched."""
    mock_plans.return_value = []
    mock_update.side_effect = ApiError(500, "boom")
    manager = SubscriptionManager(Mock(), notifier)
    previous = [_subscription(4)]
    manager.subscriptions = previous

    assert manager.renew(7) is None

    assert manager.subscriptions is previous
    assert manager.subscriptions[0].start == datetime(2024, 1, 1)
    mock_list.assert_not_called()
    assert notifier.last().message == "Erreur lors du renouvellement de l'abonnement"


@pytest.mark.unit
def test_renew_without_subscription_warns(notifier: Notifier) -> None:
    """Test that renewing with nothing to renew only warns."""
    manager = SubscriptionManager(Mock(), notifier)

    assert manager.renew(7) is None
    assert notifier.last().level == "warning"


@pytest.mark.unit
def test_reload_malformed_body_keeps_state(
    client: ApiClient, http: Mock, make_response: Callable, notifier: Notifier
) -> None:
    """Test that a non-JSON answer is notified and the previous list is kept."""
    http.request.return_value = make_response(200, content=b"not json")
    manager = SubscriptionManager(client, notifier)
    previous = [_subscription(1)]
    manager.subscriptions = previous

    assert manager.reload(7) is previous
    assert notifier.last().message == "Erreur lors du chargement des abonnements"
