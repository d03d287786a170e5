from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from streamflix.application.dto.billing import OwnedSubscription, SubscriptionJobSummary
from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.services.subscription_period import RENEWAL_WINDOW, period_end

from .billing_common import utcnow


logger = logging.getLogger(__name__)


class RenewSubscriptionsUseCase:
    """Rolls auto-renewing subscriptions that end within a day into their next period.

    A subscription whose renewal fails is marked expired and the run continues.
    Rows that changed after they were listed are left untouched.
    """

    def __init__(
        self,
        *,
        subscriptions_port: SubscriptionsPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._subscriptions_port = subscriptions_port
        self._clock = clock

    def execute(self) -> SubscriptionJobSummary:
        now = self._clock()
        due = self._subscriptions_port.list_due_renewals(window_start=now, window_end=now + RENEWAL_WINDOW)
        logger.info("Found %s subscriptions to renew", len(due))

        processed = skipped = failed = 0
        for item in due:
            subscription = item.subscription
            plan = None
            if subscription.plan_id:
                plan = self._subscriptions_port.get_plan_by_id(plan_id=subscription.plan_id)
            if plan is None:
                logger.warning("No plan found for user %s, skipping renewal", item.email)
                skipped += 1
                continue

            start = subscription.end_date
            end = period_end(start, plan.billing_cycle)
            try:
                renewed = self._subscriptions_port.renew_subscription(
                    user_id=item.user_id,
                    start_date=start,
                    end_date=end,
                    expected_version=subscription.version,
                    now=now,
                )
            except Exception:  # noqa: BLE001
                logger.exception("Error renewing subscription for %s", item.email)
                failed += 1
                self._mark_expired(item, now=now)
                continue

            if renewed is None:
                logger.warning("Subscription of %s changed since it was listed, skipping renewal", item.email)
                skipped += 1
                continue

            processed += 1
            logger.info("Renewed subscription for %s until %s", item.email, end)

        return SubscriptionJobSummary(
            job="renew_subscriptions",
            found=len(due),
            processed=processed,
            skipped=skipped,
            failed=failed,
        )

    def _mark_expired(self, item: OwnedSubscription, *, now: datetime) -> None:
        subscription = item.subscription
        try:
            updated = self._subscriptions_port.update_subscription_status(
                user_id=item.user_id,
                status="expired",
                auto_renew=subscription.auto_renew,
                expected_version=subscription.version,
                now=now,
            )
        except Exception:  # noqa: BLE001
            logger.exception("Could not mark subscription of %s as expired", item.email)
            return
        if updated is None:
            logger.warning("Subscription of %s changed meanwhile, leaving it as is", item.email)
