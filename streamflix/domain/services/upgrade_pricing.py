from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from streamflix.domain.entities.plan import BILLING_CYCLES, PLAN_TYPES, SubscriptionPlan
from streamflix.domain.entities.pricing import AcceptedUpgrade, PricingDecision, RejectedUpgrade
from streamflix.domain.exceptions import InvalidUpgradeInputError


GRACE_PERIOD_DAYS = 5
DAYS_PER_PRORATED_MONTH = 30
MONTHS_PER_YEAR = 12

INVALID_UPGRADE_PATH = "Invalid upgrade path. Can only upgrade from Basic to Advance."
FREE_UPGRADE_RATIONALE = "Free upgrade within 5 days"
MONTHLY_UPGRADE_RATIONALE = "Upgrade after 5 days: current month charge + new plan"

_ZERO = Decimal("0")
_ONE_DAY = timedelta(days=1)


def price_upgrade(
    *,
    current_plan: SubscriptionPlan,
    target_plan: SubscriptionPlan,
    subscription_start_date: datetime,
    now: datetime,
) -> PricingDecision:
    """Quote what a subscriber pays to move from ``current_plan`` to ``target_plan``.

    Only basic -> advance is an upgrade; anything else is rejected whatever the
    dates or prices. Inside the grace window the subscriber pays the price
    delta. Afterwards monthly subscribers pay both plans in full, while yearly
    subscribers get the unused part of their year credited, counting elapsed
    time in 30 day months.

    Raises ``InvalidUpgradeInputError`` for inputs that cannot be priced; a
    rejected path is returned, not raised.
    """
    _validate_plan_shape(current_plan, label="current")
    _validate_plan_shape(target_plan, label="target")

    if current_plan.type != "basic" or target_plan.type != "advance":
        return RejectedUpgrade(reason=INVALID_UPGRADE_PATH)

    _validate_price(current_plan, label="current")
    _validate_price(target_plan, label="target")
    days = days_since(subscription_start_date, now=now)

    if days <= GRACE_PERIOD_DAYS:
        return AcceptedUpgrade(
            amount_due=max(_ZERO, target_plan.price - current_plan.price),
            rationale=FREE_UPGRADE_RATIONALE,
            days_since_subscription_start=days,
        )

    if current_plan.billing_cycle == "monthly":
        return AcceptedUpgrade(
            amount_due=current_plan.price + target_plan.price,
            rationale=MONTHLY_UPGRADE_RATIONALE,
            days_since_subscription_start=days,
        )

    months_used = days // DAYS_PER_PRORATED_MONTH
    monthly_equivalent = current_plan.price / MONTHS_PER_YEAR
    used_amount = months_used * monthly_equivalent
    # Not clamped: past twelve months the credit turns into a surcharge.
    refundable_amount = current_plan.price - used_amount
    return AcceptedUpgrade(
        amount_due=max(_ZERO, target_plan.price - refundable_amount),
        rationale=f"Yearly upgrade: used {months_used} months, refund applied",
        days_since_subscription_start=days,
        used_amount=used_amount,
        refundable_amount=refundable_amount,
    )


def days_since(start: datetime, *, now: datetime) -> int:
    """Whole 24h buckets elapsed between ``start`` and ``now``."""
    if not isinstance(start, datetime) or not isinstance(now, datetime):
        raise InvalidUpgradeInputError("Subscription start date is missing or malformed.")
    if (start.tzinfo is None) != (now.tzinfo is None):
        raise InvalidUpgradeInputError("Subscription start date and current time must share timezone awareness.")
    if start > now:
        raise InvalidUpgradeInputError("Subscription start date is in the future.")
    return (now - start) // _ONE_DAY


def _validate_plan_shape(plan: SubscriptionPlan, *, label: str) -> None:
    if plan is None:
        raise InvalidUpgradeInputError(f"The {label} plan is missing.")
    if plan.type not in PLAN_TYPES:
        raise InvalidUpgradeInputError(f"The {label} plan has an unknown type '{plan.type}'.")
    if plan.billing_cycle not in BILLING_CYCLES:
        raise InvalidUpgradeInputError(
            f"The {label} plan has an unknown billing cycle '{plan.billing_cycle}'."
        )


def _validate_price(plan: SubscriptionPlan, *, label: str) -> None:
    if not isinstance(plan.price, Decimal) or not plan.price.is_finite():
        raise InvalidUpgradeInputError(f"The {label} plan price must be a finite decimal.")
    if plan.price < _ZERO:
        raise InvalidUpgradeInputError(f"The {label} plan price cannot be negative.")
