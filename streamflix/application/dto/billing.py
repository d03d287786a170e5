from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from streamflix.domain.entities.plan import SubscriptionPlan
from streamflix.domain.entities.subscription import UserSubscription


@dataclass(frozen=True)
class QuoteUpgradeInput:
    user_id: str
    new_plan_id: str


@dataclass(frozen=True)
class QuoteUpgradeOutput:
    upgrade_amount: Decimal
    reason: str
    days_since_subscription: int
    new_plan: SubscriptionPlan


@dataclass(frozen=True)
class CreatePaymentOrderInput:
    user_id: str
    plan_id: str
    is_upgrade: bool = False


@dataclass(frozen=True)
class CreatePaymentOrderOutput:
    order_id: str
    client_secret: str | None
    amount: Decimal
    amount_minor: int
    currency: str
    publishable_key: str | None
    plan_name: str
    is_upgrade: bool
    receipt: str


@dataclass(frozen=True)
class PaymentOrder:
    id: str
    status: str
    amount_minor: int
    currency: str
    client_secret: str | None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VerifyPaymentInput:
    user_id: str
    order_id: str
    plan_id: str


@dataclass(frozen=True)
class VerifyPaymentOutput:
    subscription: UserSubscription
    plan: SubscriptionPlan


@dataclass(frozen=True)
class CancelSubscriptionOutput:
    end_date: datetime | None


@dataclass(frozen=True)
class MySubscriptionOutput:
    status: str
    plan: SubscriptionPlan | None
    start_date: datetime | None
    end_date: datetime | None
    auto_renew: bool
    days_remaining: int


@dataclass(frozen=True)
class OwnedSubscription:
    user_id: str
    email: str
    subscription: UserSubscription


@dataclass(frozen=True)
class DueRenewalOutput:
    email: str
    plan_name: str | None
    end_date: datetime | None


@dataclass(frozen=True)
class SubscriptionJobSummary:
    job: str
    found: int
    processed: int
    skipped: int = 0
    failed: int = 0
