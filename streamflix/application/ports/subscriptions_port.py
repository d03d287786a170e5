from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from streamflix.application.dto.billing import OwnedSubscription
from streamflix.domain.entities.plan import SubscriptionPlan
from streamflix.domain.entities.subscription import (
    PaymentRecord,
    SubscriptionStatus,
    UserSubscription,
)


class SubscriptionsPort(Protocol):
    def list_active_plans(self) -> list[SubscriptionPlan]:
        ...

    def get_plan_by_id(self, *, plan_id: str) -> SubscriptionPlan | None:
        ...

    def get_subscription_for_user(self, *, user_id: str) -> UserSubscription | None:
        ...

    def get_payment_by_gateway_id(self, *, gateway_payment_id: str) -> PaymentRecord | None:
        ...

    def activate_with_payment(
        self,
        *,
        user_id: str,
        plan_id: str,
        start_date: datetime,
        end_date: datetime,
        payment_id: str,
        amount: Decimal,
        currency: str,
        gateway_payment_id: str,
        expected_version: int | None,
        now: datetime,
    ) -> UserSubscription | None:
        """Activate the subscription and record the payment atomically.

        Returns ``None`` when ``expected_version`` no longer matches the stored
        subscription (``None`` expects no subscription row yet). Raises
        ``PaymentConflictError`` when the gateway payment was already recorded.
        """
        ...

    def update_subscription_status(
        self,
        *,
        user_id: str,
        status: SubscriptionStatus,
        auto_renew: bool,
        expected_version: int,
        now: datetime,
    ) -> UserSubscription | None:
        ...

    def renew_subscription(
        self,
        *,
        user_id: str,
        start_date: datetime,
        end_date: datetime,
        expected_version: int,
        now: datetime,
    ) -> UserSubscription | None:
        ...

    def cancel_with_record(
        self,
        *,
        user_id: str,
        expected_version: int,
        payment_id: str,
        amount: Decimal,
        currency: str,
        gateway_payment_id: str,
        now: datetime,
    ) -> UserSubscription | None:
        """Cancel the subscription and record the cancellation payment atomically.

        Returns ``None`` when ``expected_version`` no longer matches; nothing is
        written in that case.
        """
        ...

    def list_due_renewals(self, *, window_start: datetime, window_end: datetime) -> list[OwnedSubscription]:
        ...

    def list_lapsed_active_subscriptions(self, *, now: datetime) -> list[OwnedSubscription]:
        ...
