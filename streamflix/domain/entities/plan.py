from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal


PlanType = Literal["basic", "advance"]
BillingCycle = Literal["monthly", "yearly"]
VideoQuality = Literal["720p", "1080p", "4K"]

PLAN_TYPES: frozenset[str] = frozenset({"basic", "advance"})
BILLING_CYCLES: frozenset[str] = frozenset({"monthly", "yearly"})


@dataclass(frozen=True)
class SubscriptionPlan:
    id: str
    name: str
    type: PlanType
    billing_cycle: BillingCycle
    price: Decimal
    currency: str
    features: tuple[str, ...]
    video_quality: VideoQuality
    simultaneous_streams: int
    download_limit: int
    is_active: bool
