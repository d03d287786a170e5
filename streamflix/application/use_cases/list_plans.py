from __future__ import annotations

from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.entities.plan import SubscriptionPlan


class ListPlansUseCase:
    def __init__(self, *, subscriptions_port: SubscriptionsPort):
        self._subscriptions_port = subscriptions_port

    def execute(self) -> list[SubscriptionPlan]:
        plans = self._subscriptions_port.list_active_plans()
        return sorted(plans, key=lambda plan: plan.price)
