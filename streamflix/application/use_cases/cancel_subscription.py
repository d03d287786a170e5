from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable
from uuid import uuid4

from streamflix.application.dto.billing import CancelSubscriptionOutput
from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.entities.subscription import is_subscription_active
from streamflix.domain.exceptions import SubscriptionConflictError, SubscriptionStateError

from .billing_common import utcnow


logger = logging.getLogger(__name__)


class CancelSubscriptionUseCase:
    """Stops auto-renewal; access is kept until the current period ends."""

    def __init__(
        self,
        *,
        subscriptions_port: SubscriptionsPort,
        currency: str,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._subscriptions_port = subscriptions_port
        self._currency = currency
        self._clock = clock

    def execute(self, *, user_id: str) -> CancelSubscriptionOutput:
        subscription = self._subscriptions_port.get_subscription_for_user(user_id=user_id)
        if not is_subscription_active(subscription):
            raise SubscriptionStateError("No active subscription to cancel.")

        now = self._clock()
        updated = self._subscriptions_port.cancel_with_record(
            user_id=user_id,
            expected_version=subscription.version,
            payment_id=str(uuid4()),
            amount=Decimal("0"),
            currency=self._currency,
            gateway_payment_id=f"cancel_{int(now.timestamp() * 1000)}",
            now=now,
        )
        if updated is None:
            raise SubscriptionConflictError("Subscription was modified concurrently. Please retry.")

        logger.info("Subscription cancelled for user %s; access until %s", user_id, updated.end_date)
        return CancelSubscriptionOutput(end_date=updated.end_date)
