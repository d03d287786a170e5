from __future__ import annotations

from datetime import datetime
from typing import Callable

from streamflix.application.dto.billing import QuoteUpgradeInput, QuoteUpgradeOutput
from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.entities.subscription import is_subscription_active
from streamflix.domain.exceptions import PlanNotFoundError, SubscriptionStateError

from .billing_common import quote_for_subscription, utcnow


class QuoteUpgradeUseCase:
    def __init__(
        self,
        *,
        subscriptions_port: SubscriptionsPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._subscriptions_port = subscriptions_port
        self._clock = clock

    def execute(self, command: QuoteUpgradeInput) -> QuoteUpgradeOutput:
        subscription = self._subscriptions_port.get_subscription_for_user(user_id=command.user_id)
        if not is_subscription_active(subscription):
            raise SubscriptionStateError("No active subscription to upgrade.")

        new_plan = self._subscriptions_port.get_plan_by_id(plan_id=command.new_plan_id)
        if new_plan is None:
            raise PlanNotFoundError("New plan not found.")

        decision = quote_for_subscription(
            subscriptions_port=self._subscriptions_port,
            subscription=subscription,
            target_plan=new_plan,
            now=self._clock(),
        )
        return QuoteUpgradeOutput(
            upgrade_amount=decision.amount_due,
            reason=decision.rationale,
            days_since_subscription=decision.days_since_subscription_start,
            new_plan=new_plan,
        )
