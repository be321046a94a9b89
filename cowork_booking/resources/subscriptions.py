from typing import List

from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_list, parse_model, parse_saved
from cowork_booking.schemas.subscriptions import Subscription, SubscriptionPlan

SUBSCRIPTIONS_PATH = "/api/abonnements"
PLANS_PATH = "/api/subscription-plans"


def list_subscriptions(client: ApiClient) -> List[Subscription]:
    return parse_list(Subscription, client.get(SUBSCRIPTIONS_PATH))


def list_subscriptions_by_user(client: ApiClient, user_id: int) -> List[Subscription]:
    return parse_list(Subscription, client.get(f"{SUBSCRIPTIONS_PATH}/user/{user_id}"))


def create_subscription(client: ApiClient, subscription: Subscription) -> Subscription:
    return parse_model(Subscription, client.post(SUBSCRIPTIONS_PATH, subscription.to_wire()))


def update_subscription(
    client: ApiClient, subscription_id: int, subscription: Subscription
) -> Subscription:
    body = client.put(f"{SUBSCRIPTIONS_PATH}/{subscription_id}", subscription.to_wire())
    return parse_saved(Subscription, body, subscription)


def delete_subscription(client: ApiClient, subscription_id: int) -> None:
    client.delete(f"{SUBSCRIPTIONS_PATH}/{subscription_id}")


def list_plans(client: ApiClient) -> List[SubscriptionPlan]:
    return parse_list(SubscriptionPlan, client.get(PLANS_PATH))
