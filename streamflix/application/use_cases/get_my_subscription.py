from __future__ import annotations

from datetime import datetime
from typing import Callable

from streamflix.application.dto.billing import MySubscriptionOutput
from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.services.subscription_period import days_remaining

from .billing_common import utcnow


class GetMySubscriptionUseCase:
    def __init__(
        self,
        *,
        subscriptions_port: SubscriptionsPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._subscriptions_port = subscriptions_port
        self._clock = clock

    def execute(self, *, user_id: str) -> MySubscriptionOutput:
        subscription = self._subscriptions_port.get_subscription_for_user(user_id=user_id)
        if subscription is None:
            return MySubscriptionOutput(
                status="inactive",
                plan=None,
                start_date=None,
                end_date=None,
                auto_renew=False,
                days_remaining=0,
            )

        plan = None
        if subscription.plan_id:
            plan = self._subscriptions_port.get_plan_by_id(plan_id=subscription.plan_id)
        return MySubscriptionOutput(
            status=subscription.status,
            plan=plan,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            auto_renew=subscription.auto_renew,
            days_remaining=days_remaining(subscription.end_date, now=self._clock()),
        )
