from __future__ import annotations

import unittest
from dataclasses import replace
from datetime import timedelta

from streamflix.application.dto.billing import SubscriptionJobSummary
from streamflix.application.use_cases.expire_subscriptions import ExpireSubscriptionsUseCase
from streamflix.application.use_cases.list_due_renewals import ListDueRenewalsUseCase
from streamflix.application.use_cases.renew_subscriptions import RenewSubscriptionsUseCase
from streamflix.infrastructure.scheduling.subscription_jobs import (
    EXPIRY_JOB_ID,
    RENEWAL_JOB_ID,
    SubscriptionJobScheduler,
)
from tests.fakes import NOW, FakeSubscriptionsPort, make_plan, make_subscription


def _clock():
    return NOW


def _port():
    plans = [
        make_plan("basic-monthly", type="basic", billing_cycle="monthly", price="199"),
        make_plan("advance-yearly", type="advance", billing_cycle="yearly", price="4999"),
    ]
    subscriptions = [
        make_subscription(user_id="due-monthly", end_date=NOW + timedelta(hours=12)),
        make_subscription(user_id="due-yearly", plan_id="advance-yearly", end_date=NOW + timedelta(hours=20)),
        make_subscription(user_id="not-yet", end_date=NOW + timedelta(days=3)),
        make_subscription(user_id="no-auto-renew", auto_renew=False, end_date=NOW + timedelta(hours=6)),
        make_subscription(user_id="cancelled", status="cancelled", end_date=NOW + timedelta(hours=6)),
        make_subscription(user_id="lapsed", end_date=NOW - timedelta(hours=1)),
    ]
    return FakeSubscriptionsPort(plans=plans, subscriptions=subscriptions)


class ListDueRenewalsTests(unittest.TestCase):
    def test_lists_active_auto_renewing_subscriptions_ending_within_a_day(self):
        output = ListDueRenewalsUseCase(subscriptions_port=_port(), clock=_clock).execute()

        by_email = {item.email: item for item in output}
        self.assertEqual(set(by_email), {"due-monthly@example.com", "due-yearly@example.com"})
        self.assertEqual(by_email["due-yearly@example.com"].plan_name, "Advance Yearly")
        self.assertEqual(by_email["due-monthly@example.com"].end_date, NOW + timedelta(hours=12))


class RenewSubscriptionsTests(unittest.TestCase):
    def test_rolls_due_subscriptions_into_next_period(self):
        port = _port()

        summary = RenewSubscriptionsUseCase(subscriptions_port=port, clock=_clock).execute()

        self.assertEqual(summary, SubscriptionJobSummary(job="renew_subscriptions", found=2, processed=2))
        monthly = port.subscriptions["due-monthly"]
        self.assertEqual(monthly.start_date, NOW + timedelta(hours=12))
        self.assertEqual(monthly.end_date, (NOW + timedelta(hours=12)).replace(month=7))
        self.assertEqual(monthly.status, "active")
        yearly = port.subscriptions["due-yearly"]
        self.assertEqual(yearly.end_date, (NOW + timedelta(hours=20)).replace(year=2025))
        self.assertEqual(port.subscriptions["not-yet"].end_date, NOW + timedelta(days=3))

    def test_skips_subscriptions_whose_plan_is_gone(self):
        port = _port()
        del port.plans["advance-yearly"]

        summary = RenewSubscriptionsUseCase(subscriptions_port=port, clock=_clock).execute()

        self.assertEqual(summary.processed, 1)
        self.assertEqual(summary.skipped, 1)
        self.assertEqual(port.subscriptions["due-yearly"].status, "active")

    def test_failed_renewal_marks_subscription_expired_and_continues(self):
        port = _port()
        port.failing_renewals.add("due-monthly")

        with self.assertLogs("streamflix.application.use_cases.renew_subscriptions", level="ERROR"):
            summary = RenewSubscriptionsUseCase(subscriptions_port=port, clock=_clock).execute()

        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.processed, 1)
        self.assertEqual(port.subscriptions["due-monthly"].status, "expired")
        self.assertEqual(port.subscriptions["due-yearly"].status, "active")


class ExpireSubscriptionsTests(unittest.TestCase):
    def test_marks_lapsed_active_subscriptions_expired(self):
        port = _port()

        summary = ExpireSubscriptionsUseCase(subscriptions_port=port, clock=_clock).execute()

        self.assertEqual(summary.found, 1)
        self.assertEqual(summary.processed, 1)
        self.assertEqual(port.subscriptions["lapsed"].status, "expired")
        self.assertEqual(port.subscriptions["due-monthly"].status, "active")

    def test_second_run_finds_nothing(self):
        port = _port()
        use_case = ExpireSubscriptionsUseCase(subscriptions_port=port, clock=_clock)
        use_case.execute()

        summary = use_case.execute()

        self.assertEqual(summary.found, 0)


class FakeScheduler:
    def __init__(self):
        self.jobs: dict[str, tuple] = {}
        self.running = False

    def add_job(self, func, trigger, *, id, name, replace_existing):
        self.jobs[id] = (func, trigger, name, replace_existing)

    def start(self):
        self.running = True

    def shutdown(self, wait=True):
        self.running = False


class FailingUseCase:
    def execute(self):
        raise RuntimeError("database unavailable")


class SubscriptionJobSchedulerTests(unittest.TestCase):
    def test_start_registers_both_jobs(self):
        fake_scheduler = FakeScheduler()
        port = _port()
        scheduler = SubscriptionJobScheduler(
            renew_use_case_factory=lambda: RenewSubscriptionsUseCase(subscriptions_port=port, clock=_clock),
            expire_use_case_factory=lambda: ExpireSubscriptionsUseCase(subscriptions_port=port, clock=_clock),
            scheduler=fake_scheduler,
        )

        scheduler.start()

        self.assertTrue(fake_scheduler.running)
        self.assertEqual(set(fake_scheduler.jobs), {RENEWAL_JOB_ID, EXPIRY_JOB_ID})
        self.assertIn("hour='2'", str(fake_scheduler.jobs[RENEWAL_JOB_ID][1]))
        self.assertIn("hour='*/6'", str(fake_scheduler.jobs[EXPIRY_JOB_ID][1]))

        scheduler.shutdown()
        self.assertFalse(fake_scheduler.running)

    def test_job_runs_use_fresh_use_cases(self):
        port = _port()
        scheduler = SubscriptionJobScheduler(
            renew_use_case_factory=lambda: RenewSubscriptionsUseCase(subscriptions_port=port, clock=_clock),
            expire_use_case_factory=lambda: ExpireSubscriptionsUseCase(subscriptions_port=port, clock=_clock),
            scheduler=FakeScheduler(),
        )

        scheduler.run_renewals()
        scheduler.run_expirations()

        self.assertEqual(port.subscriptions["due-monthly"].version, 2)
        self.assertEqual(port.subscriptions["lapsed"].status, "expired")

    def test_job_failure_is_logged_not_raised(self):
        scheduler = SubscriptionJobScheduler(
            renew_use_case_factory=FailingUseCase,
            expire_use_case_factory=FailingUseCase,
            scheduler=FakeScheduler(),
        )

        with self.assertLogs("streamflix.infrastructure.scheduling.subscription_jobs", level="ERROR") as logs:
            scheduler.run_renewals()
            scheduler.run_expirations()

        self.assertEqual(len(logs.records), 2)


class _UpgradedDuringRenewalPort(FakeSubscriptionsPort):
    """Applies a paid upgrade to the row right before the renewal write lands."""

    def renew_subscription(self, *, user_id, start_date, end_date, expected_version, now):
        current = self.subscriptions[user_id]
        self.subscriptions[user_id] = replace(
            current,
            plan_id="advance-yearly",
            start_date=now,
            end_date=now.replace(year=now.year + 1),
            version=current.version + 1,
        )
        return super().renew_subscription(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            expected_version=expected_version,
            now=now,
        )


class _ChangedThenFailingRenewalPort(FakeSubscriptionsPort):
    def renew_subscription(self, *, user_id, start_date, end_date, expected_version, now):
        current = self.subscriptions[user_id]
        self.subscriptions[user_id] = replace(current, end_date=now + timedelta(days=30), version=current.version + 1)
        raise RuntimeError("connection reset")


class _PaidWhileExpiringPort(FakeSubscriptionsPort):
    def list_lapsed_active_subscriptions(self, *, now):
        lapsed = super().list_lapsed_active_subscriptions(now=now)
        for item in lapsed:
            current = self.subscriptions[item.user_id]
            self.subscriptions[item.user_id] = replace(
                current,
                start_date=now,
                end_date=now + timedelta(days=30),
                version=current.version + 1,
            )
        return lapsed


def _racing_port(port_class):
    port = _port()
    return port_class(plans=port.plans.values(), subscriptions=port.subscriptions.values())


class SubscriptionJobRaceTests(unittest.TestCase):
    def test_renewal_leaves_a_concurrently_upgraded_subscription_alone(self):
        port = _racing_port(_UpgradedDuringRenewalPort)

        summary = RenewSubscriptionsUseCase(subscriptions_port=port, clock=_clock).execute()

        self.assertEqual(summary.processed, 0)
        self.assertEqual(summary.skipped, 2)
        self.assertEqual(summary.failed, 0)
        upgraded = port.subscriptions["due-monthly"]
        self.assertEqual(upgraded.status, "active")
        self.assertEqual(upgraded.plan_id, "advance-yearly")
        self.assertEqual(upgraded.end_date, NOW.replace(year=2025))

    def test_failed_renewal_does_not_expire_a_row_that_changed_meanwhile(self):
        port = _racing_port(_ChangedThenFailingRenewalPort)

        with self.assertLogs("streamflix.application.use_cases.renew_subscriptions", level="ERROR"):
            summary = RenewSubscriptionsUseCase(subscriptions_port=port, clock=_clock).execute()

        self.assertEqual(summary.failed, 2)
        self.assertEqual(port.subscriptions["due-monthly"].status, "active")
        self.assertEqual(port.subscriptions["due-monthly"].end_date, NOW + timedelta(days=30))

    def test_expiry_skips_a_subscription_paid_after_it_was_listed(self):
        port = _racing_port(_PaidWhileExpiringPort)

        summary = ExpireSubscriptionsUseCase(subscriptions_port=port, clock=_clock).execute()

        self.assertEqual(summary.found, 1)
        self.assertEqual(summary.processed, 0)
        self.assertEqual(summary.skipped, 1)
        self.assertEqual(port.subscriptions["lapsed"].status, "active")
