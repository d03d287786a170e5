from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from uuid import uuid4

from streamflix.application.dto.billing import PaymentOrder, VerifyPaymentInput, VerifyPaymentOutput
from streamflix.application.ports.payment_gateway_port import PaymentGatewayPort
from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.entities.subscription import UserSubscription, is_subscription_active
from streamflix.domain.exceptions import (
    PaymentConflictError,
    PaymentGatewayUnavailableError,
    PaymentVerificationError,
    PlanNotFoundError,
    SubscriptionConflictError,
)
from streamflix.domain.services.subscription_period import from_minor_units, period_end

from .billing_common import utcnow


logger = logging.getLogger(__name__)

SUCCEEDED_STATUS = "succeeded"


class VerifyPaymentUseCase:
    def __init__(
        self,
        *,
        subscriptions_port: SubscriptionsPort,
        payment_gateway: PaymentGatewayPort | None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._subscriptions_port = subscriptions_port
        self._payment_gateway = payment_gateway
        self._clock = clock

    def execute(self, command: VerifyPaymentInput) -> VerifyPaymentOutput:
        if self._payment_gateway is None:
            raise PaymentGatewayUnavailableError("Payment service is not configured. Please contact support.")

        order = self._payment_gateway.get_payment_order(order_id=command.order_id)
        self._check_order(order, command)

        plan = self._subscriptions_port.get_plan_by_id(plan_id=command.plan_id)
        if plan is None:
            raise PlanNotFoundError("Plan not found.")

        if self._subscriptions_port.get_payment_by_gateway_id(gateway_payment_id=order.id) is not None:
            raise PaymentConflictError("Payment was already applied.")

        subscription = self._subscriptions_port.get_subscription_for_user(user_id=command.user_id)
        _check_quote_still_valid(order, subscription)

        now = self._clock()
        activated = self._subscriptions_port.activate_with_payment(
            user_id=command.user_id,
            plan_id=plan.id,
            start_date=now,
            end_date=period_end(now, plan.billing_cycle),
            payment_id=str(uuid4()),
            amount=from_minor_units(order.amount_minor),
            currency=order.currency.upper(),
            gateway_payment_id=order.id,
            expected_version=subscription.version if subscription is not None else None,
            now=now,
        )
        if activated is None:
            raise SubscriptionConflictError("Subscription was modified concurrently. Please retry.")

        logger.info(
            "Subscription activated for user %s on plan %s until %s",
            command.user_id,
            plan.name,
            activated.end_date,
        )
        return VerifyPaymentOutput(subscription=activated, plan=plan)

    def _check_order(self, order: PaymentOrder, command: VerifyPaymentInput) -> None:
        if order.status != SUCCEEDED_STATUS:
            logger.warning("Payment order %s not settled (status=%s)", order.id, order.status)
            raise PaymentVerificationError("Invalid payment: order has not succeeded.")
        if order.metadata.get("user_id") != command.user_id or order.metadata.get("plan_id") != command.plan_id:
            logger.warning("Payment order %s does not belong to user %s", order.id, command.user_id)
            raise PaymentVerificationError("Invalid payment: order does not match this user and plan.")


def _check_quote_still_valid(order: PaymentOrder, subscription: UserSubscription | None) -> None:
    quoted = order.metadata.get("quoted_start_date")
    if not quoted:
        return
    if (
        not is_subscription_active(subscription)
        or subscription.start_date is None
        or subscription.start_date != datetime.fromisoformat(quoted)
        or subscription.plan_id != order.metadata.get("quoted_plan_id", subscription.plan_id)
    ):
        raise SubscriptionConflictError("Subscription changed since the upgrade was quoted.")
