from __future__ import annotations

from datetime import datetime
from typing import Callable

from streamflix.application.dto.billing import DueRenewalOutput
from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.services.subscription_period import RENEWAL_WINDOW

from .billing_common import utcnow


class ListDueRenewalsUseCase:
    def __init__(
        self,
        *,
        subscriptions_port: SubscriptionsPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._subscriptions_port = subscriptions_port
        self._clock = clock

    def execute(self) -> list[DueRenewalOutput]:
        now = self._clock()
        due = self._subscriptions_port.list_due_renewals(window_start=now, window_end=now + RENEWAL_WINDOW)

        plan_names: dict[str, str | None] = {}
        output: list[DueRenewalOutput] = []
        for item in due:
            plan_id = item.subscription.plan_id
            if plan_id and plan_id not in plan_names:
                plan = self._subscriptions_port.get_plan_by_id(plan_id=plan_id)
                plan_names[plan_id] = plan.name if plan is not None else None
            output.append(
                DueRenewalOutput(
                    email=item.email,
                    plan_name=plan_names.get(plan_id) if plan_id else None,
                    end_date=item.subscription.end_date,
                )
            )
        return output
