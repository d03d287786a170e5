from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class AcceptedUpgrade:
    amount_due: Decimal
    rationale: str
    days_since_subscription_start: int
    used_amount: Decimal | None = None
    refundable_amount: Decimal | None = None


@dataclass(frozen=True)
class RejectedUpgrade:
    reason: str


PricingDecision = Union[AcceptedUpgrade, RejectedUpgrade]
