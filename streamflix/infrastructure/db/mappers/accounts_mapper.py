from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

from streamflix.domain.entities.plan import SubscriptionPlan
from streamflix.domain.entities.subscription import PaymentRecord, UserSubscription
from streamflix.domain.entities.user import User


def _as_str(value: Any) -> str:
    return str(value)


def _as_str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        name=row["name"],
        email=row["email"],
        role=row["role"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_row_to_plan(row: Mapping[str, Any]) -> SubscriptionPlan:
    return SubscriptionPlan(
        id=_as_str(row["id"]),
        name=row["name"],
        type=row["type"],
        billing_cycle=row["billing_cycle"],
        price=Decimal(row["price"]),
        currency=row["currency"],
        features=tuple(row.get("features") or ()),
        video_quality=row["video_quality"],
        simultaneous_streams=int(row["simultaneous_streams"]),
        download_limit=int(row["download_limit"]),
        is_active=bool(row["is_active"]),
    )


def map_row_to_subscription(row: Mapping[str, Any]) -> UserSubscription:
    return UserSubscription(
        user_id=_as_str(row["user_id"]),
        plan_id=_as_str_or_none(row.get("plan_id")),
        status=row["status"],
        start_date=row.get("start_date"),
        end_date=row.get("end_date"),
        auto_renew=bool(row["auto_renew"]),
        payment_reference=row.get("payment_reference"),
        version=int(row["version"]),
        updated_at=row["updated_at"],
    )


def map_row_to_payment(row: Mapping[str, Any]) -> PaymentRecord:
    return PaymentRecord(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        amount=Decimal(row["amount"]),
        currency=row["currency"],
        status=row["status"],
        gateway_payment_id=row["gateway_payment_id"],
        created_at=row["created_at"],
    )
