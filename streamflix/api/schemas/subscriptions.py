from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class PlanResponse(BaseModel):
    id: str
    name: str
    type: str
    billing_cycle: str
    price: Decimal
    currency: str
    features: list[str]
    video_quality: str
    simultaneous_streams: int
    download_limit: int


class UpgradeQuoteRequest(BaseModel):
    new_plan_id: str = Field(..., min_length=1)


class UpgradePlanSummary(BaseModel):
    name: str
    price: Decimal
    features: list[str]


class UpgradeQuoteResponse(BaseModel):
    can_upgrade: bool = True
    upgrade_amount: Decimal
    reason: str
    days_since_subscription: int
    new_plan: UpgradePlanSummary


class CreateOrderRequest(BaseModel):
    plan_id: str = Field(..., min_length=1)
    is_upgrade: bool = False


class CreateOrderResponse(BaseModel):
    success: bool = True
    order_id: str
    client_secret: str | None
    amount: int
    display_amount: Decimal
    currency: str
    publishable_key: str | None
    plan_name: str
    is_upgrade: bool
    receipt: str


class VerifyPaymentRequest(BaseModel):
    order_id: str = Field(..., min_length=1)
    plan_id: str = Field(..., min_length=1)


class SubscriptionResponse(BaseModel):
    plan_id: str | None
    status: str
    start_date: datetime | None
    end_date: datetime | None
    auto_renew: bool


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    message: str
    subscription: SubscriptionResponse


class CancelSubscriptionResponse(BaseModel):
    success: bool = True
    message: str
    end_date: datetime | None


class ReactivateSubscriptionResponse(BaseModel):
    success: bool = True
    message: str
    subscription: SubscriptionResponse


class MySubscriptionDetail(BaseModel):
    status: str
    plan: PlanResponse | None
    start_date: datetime | None
    end_date: datetime | None
    auto_renew: bool
    days_remaining: int


class MySubscriptionResponse(BaseModel):
    success: bool = True
    subscription: MySubscriptionDetail


class DueRenewalResponse(BaseModel):
    email: str
    plan: str | None
    end_date: datetime | None


class CheckRenewalsResponse(BaseModel):
    success: bool = True
    message: str
    subscriptions: list[DueRenewalResponse]
