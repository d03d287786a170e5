from __future__ import annotations

import calendar
import math
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from streamflix.domain.entities.plan import BillingCycle


RENEWAL_WINDOW = timedelta(days=1)


def add_months(value: datetime, months: int) -> datetime:
    # Clamps to the last day of the target month (Jan 31 + 1 month -> Feb 28/29).
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def period_end(start: datetime, billing_cycle: BillingCycle) -> datetime:
    if billing_cycle == "monthly":
        return add_months(start, 1)
    return add_months(start, 12)


def days_remaining(end_date: datetime | None, *, now: datetime) -> int:
    if end_date is None:
        return 0
    return math.ceil((end_date - now) / timedelta(days=1))


def is_renewal_due(end_date: datetime | None, *, now: datetime) -> bool:
    if end_date is None:
        return False
    return now <= end_date < now + RENEWAL_WINDOW


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))
