from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.entities.subscription import UserSubscription
from streamflix.domain.exceptions import SubscriptionConflictError, SubscriptionStateError

from .billing_common import utcnow


logger = logging.getLogger(__name__)


class ReactivateSubscriptionUseCase:
    def __init__(
        self,
        *,
        subscriptions_port: SubscriptionsPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._subscriptions_port = subscriptions_port
        self._clock = clock

    def execute(self, *, user_id: str) -> UserSubscription:
        subscription = self._subscriptions_port.get_subscription_for_user(user_id=user_id)
        if subscription is None or subscription.status != "cancelled":
            raise SubscriptionStateError("No cancelled subscription to reactivate.")

        now = self._clock()
        if subscription.end_date is None or now > subscription.end_date:
            raise SubscriptionStateError("Subscription period has expired. Please subscribe to a new plan.")

        updated = self._subscriptions_port.update_subscription_status(
            user_id=user_id,
            status="active",
            auto_renew=True,
            expected_version=subscription.version,
            now=now,
        )
        if updated is None:
            raise SubscriptionConflictError("Subscription was modified concurrently. Please retry.")
        logger.info("Subscription reactivated for user %s", user_id)
        return updated
