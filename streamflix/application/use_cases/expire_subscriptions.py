from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from streamflix.application.dto.billing import SubscriptionJobSummary
from streamflix.application.ports.subscriptions_port import SubscriptionsPort

from .billing_common import utcnow


logger = logging.getLogger(__name__)


class ExpireSubscriptionsUseCase:
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
        lapsed = self._subscriptions_port.list_lapsed_active_subscriptions(now=now)
        logger.info("Found %s expired subscriptions", len(lapsed))

        processed = skipped = 0
        for item in lapsed:
            updated = self._subscriptions_port.update_subscription_status(
                user_id=item.user_id,
                status="expired",
                auto_renew=item.subscription.auto_renew,
                expected_version=item.subscription.version,
                now=now,
            )
            if updated is None:
                skipped += 1
                continue
            processed += 1
            logger.info("Marked subscription as expired for %s", item.email)

        return SubscriptionJobSummary(
            job="expire_subscriptions",
            found=len(lapsed),
            processed=processed,
            skipped=skipped,
        )
