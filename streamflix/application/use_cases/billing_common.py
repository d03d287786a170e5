from __future__ import annotations

from datetime import datetime, timezone

from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.entities.plan import SubscriptionPlan
from streamflix.domain.entities.pricing import AcceptedUpgrade, RejectedUpgrade
from streamflix.domain.entities.subscription import UserSubscription
from streamflix.domain.exceptions import InvalidUpgradeInputError, UpgradeRejectedError
from streamflix.domain.services.upgrade_pricing import price_upgrade


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def quote_for_subscription(
    *,
    subscriptions_port: SubscriptionsPort,
    subscription: UserSubscription,
    target_plan: SubscriptionPlan,
    now: datetime,
) -> AcceptedUpgrade:
    current_plan = None
    if subscription.plan_id:
        current_plan = subscriptions_port.get_plan_by_id(plan_id=subscription.plan_id)
    if current_plan is None:
        raise InvalidUpgradeInputError("Cannot price upgrade: current plan not found.")
    if subscription.start_date is None:
        raise InvalidUpgradeInputError("Cannot price upgrade: subscription has no start date.")

    decision = price_upgrade(
        current_plan=current_plan,
        target_plan=target_plan,
        subscription_start_date=subscription.start_date,
        now=now,
    )
    if isinstance(decision, RejectedUpgrade):
        raise UpgradeRejectedError(decision.reason)
    return decision
