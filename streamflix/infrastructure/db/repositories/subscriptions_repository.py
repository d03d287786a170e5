from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from streamflix.application.dto.billing import OwnedSubscription
from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.exceptions import PaymentConflictError
from streamflix.infrastructure.db.mappers.accounts_mapper import (
    map_row_to_payment,
    map_row_to_plan,
    map_row_to_subscription,
)


PLAN_COLUMNS = """
    id, name, type, billing_cycle, price, currency, features,
    video_quality, simultaneous_streams, download_limit, is_active
"""
SUBSCRIPTION_COLUMNS = """
    user_id, plan_id, status, start_date, end_date, auto_renew,
    payment_reference, version, updated_at
"""
PAYMENT_COLUMNS = "id, user_id, amount, currency, status, gateway_payment_id, created_at"

_INSERT_PAYMENT_SQL = f"""
    INSERT INTO public.payments (
        id, user_id, amount, currency, status, gateway_payment_id, created_at
    ) VALUES (
        :id, :user_id, :amount, :currency, :status, :gateway_payment_id, :created_at
    )
    RETURNING {PAYMENT_COLUMNS}
"""


class SqlSubscriptionsRepository(SubscriptionsPort):
    def __init__(self, engine):
        self._engine = engine

    def list_active_plans(self):
        sql = f"""
            SELECT {PLAN_COLUMNS}
            FROM public.subscription_plans
            WHERE is_active = true
            ORDER BY price ASC
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql)).mappings().all()
        return [map_row_to_plan(row) for row in rows]

    def get_plan_by_id(self, *, plan_id: str):
        if not _is_uuid(plan_id):
            return None
        sql = f"""
            SELECT {PLAN_COLUMNS}
            FROM public.subscription_plans
            WHERE id = CAST(:plan_id AS uuid)
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"plan_id": plan_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_plan(row)

    def get_subscription_for_user(self, *, user_id: str):
        sql = f"""
            SELECT {SUBSCRIPTION_COLUMNS}
            FROM public.user_subscriptions
            WHERE user_id = :user_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_subscription(row)

    def get_payment_by_gateway_id(self, *, gateway_payment_id: str):
        sql = f"""
            SELECT {PAYMENT_COLUMNS}
            FROM public.payments
            WHERE gateway_payment_id = :gateway_payment_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"gateway_payment_id": gateway_payment_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_payment(row)

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
    ):
        params = {
            "user_id": user_id,
            "plan_id": plan_id,
            "start_date": start_date,
            "end_date": end_date,
            "payment_reference": gateway_payment_id,
            "expected_version": expected_version,
            "now": now,
        }
        if expected_version is None:
            subscription_sql = f"""
                INSERT INTO public.user_subscriptions (
                    user_id, plan_id, status, start_date, end_date, auto_renew,
                    payment_reference, version, updated_at
                ) VALUES (
                    :user_id, :plan_id, 'active', :start_date, :end_date, true,
                    :payment_reference, 1, :now
                )
                ON CONFLICT (user_id) DO NOTHING
                RETURNING {SUBSCRIPTION_COLUMNS}
            """
        else:
            subscription_sql = f"""
                UPDATE public.user_subscriptions
                SET plan_id = :plan_id,
                    status = 'active',
                    start_date = :start_date,
                    end_date = :end_date,
                    auto_renew = true,
                    payment_reference = :payment_reference,
                    version = version + 1,
                    updated_at = :now
                WHERE user_id = :user_id
                  AND version = :expected_version
                RETURNING {SUBSCRIPTION_COLUMNS}
            """

        try:
            with self._engine.begin() as conn:
                row = conn.execute(text(subscription_sql), params).mappings().first()
                if row is None:
                    return None
                conn.execute(
                    text(_INSERT_PAYMENT_SQL),
                    {
                        "id": payment_id,
                        "user_id": user_id,
                        "amount": amount,
                        "currency": currency,
                        "status": "success",
                        "gateway_payment_id": gateway_payment_id,
                        "created_at": now,
                    },
                )
        except IntegrityError as exc:
            raise PaymentConflictError("Payment was already applied.") from exc
        return map_row_to_subscription(row)

    def update_subscription_status(
        self,
        *,
        user_id: str,
        status: str,
        auto_renew: bool,
        expected_version: int,
        now: datetime,
    ):
        sql = f"""
            UPDATE public.user_subscriptions
            SET status = :status,
                auto_renew = :auto_renew,
                version = version + 1,
                updated_at = :now
            WHERE user_id = :user_id
              AND version = :expected_version
            RETURNING {SUBSCRIPTION_COLUMNS}
        """
        with self._engine.begin() as conn:
            row = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "status": status,
                    "auto_renew": auto_renew,
                    "expected_version": expected_version,
                    "now": now,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_subscription(row)

    def renew_subscription(
        self,
        *,
        user_id: str,
        start_date: datetime,
        end_date: datetime,
        expected_version: int,
        now: datetime,
    ):
        sql = f"""
            UPDATE public.user_subscriptions
            SET start_date = :start_date,
                end_date = :end_date,
                version = version + 1,
                updated_at = :now
            WHERE user_id = :user_id
              AND version = :expected_version
            RETURNING {SUBSCRIPTION_COLUMNS}
        """
        with self._engine.begin() as conn:
            row = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "start_date": start_date,
                    "end_date": end_date,
                    "expected_version": expected_version,
                    "now": now,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_subscription(row)

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
    ):
        sql = f"""
            UPDATE public.user_subscriptions
            SET status = 'cancelled',
                auto_renew = false,
                version = version + 1,
                updated_at = :now
            WHERE user_id = :user_id
              AND version = :expected_version
            RETURNING {SUBSCRIPTION_COLUMNS}
        """
        try:
            with self._engine.begin() as conn:
                row = conn.execute(
                    text(sql),
                    {"user_id": user_id, "expected_version": expected_version, "now": now},
                ).mappings().first()
                if row is None:
                    return None
                conn.execute(
                    text(_INSERT_PAYMENT_SQL),
                    {
                        "id": payment_id,
                        "user_id": user_id,
                        "amount": amount,
                        "currency": currency,
                        "status": "cancelled",
                        "gateway_payment_id": gateway_payment_id,
                        "created_at": now,
                    },
                )
        except IntegrityError as exc:
            raise PaymentConflictError("Cancellation was already recorded.") from exc
        return map_row_to_subscription(row)

    def list_due_renewals(self, *, window_start: datetime, window_end: datetime):
        sql = f"""
            SELECT u.email, {_prefixed(SUBSCRIPTION_COLUMNS, "s")}
            FROM public.user_subscriptions s
            JOIN public.users u
              ON u.id = s.user_id
            WHERE s.status = 'active'
              AND s.auto_renew = true
              AND s.end_date >= :window_start
              AND s.end_date < :window_end
            ORDER BY s.end_date ASC
        """
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(sql),
                {"window_start": window_start, "window_end": window_end},
            ).mappings().all()
        return [_map_owned(row) for row in rows]

    def list_lapsed_active_subscriptions(self, *, now: datetime):
        sql = f"""
            SELECT u.email, {_prefixed(SUBSCRIPTION_COLUMNS, "s")}
            FROM public.user_subscriptions s
            JOIN public.users u
              ON u.id = s.user_id
            WHERE s.status = 'active'
              AND s.end_date < :now
            ORDER BY s.end_date ASC
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"now": now}).mappings().all()
        return [_map_owned(row) for row in rows]


def _is_uuid(value: str) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def _prefixed(columns: str, alias: str) -> str:
    return ", ".join(f"{alias}.{column.strip()}" for column in columns.split(",") if column.strip())


def _map_owned(row) -> OwnedSubscription:
    subscription = map_row_to_subscription(row)
    return OwnedSubscription(
        user_id=subscription.user_id,
        email=row["email"],
        subscription=subscription,
    )
