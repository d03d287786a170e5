"""In-process scheduling of the subscription maintenance jobs."""

from __future__ import annotations

import logging
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from streamflix.application.use_cases.expire_subscriptions import ExpireSubscriptionsUseCase
from streamflix.application.use_cases.renew_subscriptions import RenewSubscriptionsUseCase


logger = logging.getLogger(__name__)

RENEWAL_JOB_ID = "renew_subscriptions"
EXPIRY_JOB_ID = "expire_subscriptions"


class SubscriptionJobScheduler:
    """Daily renewal at 02:00 and an expiry sweep every six hours (UTC)."""

    def __init__(
        self,
        *,
        renew_use_case_factory: Callable[[], RenewSubscriptionsUseCase],
        expire_use_case_factory: Callable[[], ExpireSubscriptionsUseCase],
        scheduler: BackgroundScheduler | None = None,
    ):
        self._renew_use_case_factory = renew_use_case_factory
        self._expire_use_case_factory = expire_use_case_factory
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    def start(self) -> None:
        logger.info("Starting subscription job scheduler...")
        self._scheduler.add_job(
            self.run_renewals,
            CronTrigger(hour=2, minute=0, timezone="UTC"),
            id=RENEWAL_JOB_ID,
            name="Renew expiring subscriptions",
            replace_existing=True,
        )
        self._scheduler.add_job(
            self.run_expirations,
            CronTrigger(hour="*/6", minute=0, timezone="UTC"),
            id=EXPIRY_JOB_ID,
            name="Expire lapsed subscriptions",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Subscription job scheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Subscription job scheduler stopped")

    def run_renewals(self) -> None:
        try:
            summary = self._renew_use_case_factory().execute()
        except Exception:  # noqa: BLE001
            logger.exception("Subscription renewal job failed")
            return
        logger.info(
            "Renewal job: found=%s renewed=%s skipped=%s failed=%s",
            summary.found,
            summary.processed,
            summary.skipped,
            summary.failed,
        )

    def run_expirations(self) -> None:
        try:
            summary = self._expire_use_case_factory().execute()
        except Exception:  # noqa: BLE001
            logger.exception("Subscription expiry job failed")
            return
        logger.info(
            "Expiry job: found=%s expired=%s skipped=%s",
            summary.found,
            summary.processed,
            summary.skipped,
        )
