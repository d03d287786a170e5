from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Literal


SubscriptionStatus = Literal["active", "cancelled", "expired", "inactive"]
PaymentStatus = Literal["success", "cancelled", "failed"]


@dataclass(frozen=True)
class UserSubscription:
    user_id: str
    plan_id: str | None
    status: SubscriptionStatus
    start_date: datetime | None
    end_date: datetime | None
    auto_renew: bool
    payment_reference: str | None
    version: int
    updated_at: datetime


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    user_id: str
    amount: Decimal
    currency: str
    status: PaymentStatus
    gateway_payment_id: str
    created_at: datetime


def is_subscription_active(subscription: UserSubscription | None) -> bool:
    return subscription is not None and subscription.status == "active"
