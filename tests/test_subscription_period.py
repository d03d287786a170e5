from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from streamflix.domain.services.subscription_period import (
    add_months,
    days_remaining,
    from_minor_units,
    is_renewal_due,
    period_end,
    to_minor_units,
)


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def test_add_months_clamps_to_month_end():
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2023, 1, 31), 1) == datetime(2023, 2, 28)
    assert add_months(datetime(2024, 12, 15), 1) == datetime(2025, 1, 15)


def test_period_end_by_billing_cycle():
    assert period_end(NOW, "monthly") == datetime(2024, 7, 15, 12, 0, tzinfo=timezone.utc)
    assert period_end(NOW, "yearly") == datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
    assert period_end(datetime(2024, 2, 29), "yearly") == datetime(2025, 2, 28)


def test_days_remaining_rounds_up_and_handles_missing_end():
    assert days_remaining(NOW + timedelta(days=2, hours=1), now=NOW) == 3
    assert days_remaining(NOW + timedelta(days=2), now=NOW) == 2
    assert days_remaining(None, now=NOW) == 0


def test_is_renewal_due_within_next_day():
    assert is_renewal_due(NOW + timedelta(hours=23), now=NOW)
    assert not is_renewal_due(NOW + timedelta(days=1), now=NOW)
    assert not is_renewal_due(NOW - timedelta(minutes=1), now=NOW)
    assert not is_renewal_due(None, now=NOW)


def test_minor_units_conversion():
    assert to_minor_units(Decimal("199")) == 19900
    assert to_minor_units(Decimal("166.665")) == 16667
    assert from_minor_units(69800) == Decimal("698.00")
