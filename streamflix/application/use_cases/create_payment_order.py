from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from streamflix.application.dto.billing import CreatePaymentOrderInput, CreatePaymentOrderOutput
from streamflix.application.ports.payment_gateway_port import PaymentGatewayPort
from streamflix.application.ports.subscriptions_port import SubscriptionsPort
from streamflix.domain.entities.subscription import is_subscription_active
from streamflix.domain.exceptions import PaymentGatewayUnavailableError, PlanNotFoundError
from streamflix.domain.services.subscription_period import to_minor_units

from .billing_common import quote_for_subscription, utcnow


logger = logging.getLogger(__name__)


def build_receipt(*, user_id: str, now: datetime) -> str:
    timestamp = str(int(now.timestamp() * 1000))[-8:]
    return f"rcpt_{timestamp}_{user_id[-6:]}"


class CreatePaymentOrderUseCase:
    def __init__(
        self,
        *,
        subscriptions_port: SubscriptionsPort,
        payment_gateway: PaymentGatewayPort | None,
        currency: str,
        publishable_key: str | None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._subscriptions_port = subscriptions_port
        self._payment_gateway = payment_gateway
        self._currency = currency
        self._publishable_key = publishable_key
        self._clock = clock

    def execute(self, command: CreatePaymentOrderInput) -> CreatePaymentOrderOutput:
        if self._payment_gateway is None:
            raise PaymentGatewayUnavailableError("Payment service is not configured. Please contact support.")

        plan = self._subscriptions_port.get_plan_by_id(plan_id=command.plan_id)
        if plan is None:
            raise PlanNotFoundError("Plan not found.")

        now = self._clock()
        amount = plan.price
        metadata = {
            "user_id": command.user_id,
            "plan_id": plan.id,
            "is_upgrade": "true" if command.is_upgrade else "false",
            "plan_name": plan.name,
        }

        if command.is_upgrade:
            subscription = self._subscriptions_port.get_subscription_for_user(user_id=command.user_id)
            # Without an active subscription an upgrade order is charged as a new subscription.
            if is_subscription_active(subscription):
                decision = quote_for_subscription(
                    subscriptions_port=self._subscriptions_port,
                    subscription=subscription,
                    target_plan=plan,
                    now=now,
                )
                amount = decision.amount_due
                metadata["quoted_start_date"] = subscription.start_date.isoformat()
                metadata["quoted_plan_id"] = subscription.plan_id
                logger.info(
                    "Upgrade amount for user %s: %s (%s)",
                    command.user_id,
                    amount,
                    decision.rationale,
                )

        receipt = build_receipt(user_id=command.user_id, now=now)
        amount_minor = to_minor_units(amount)
        order = self._payment_gateway.create_payment_order(
            amount_minor=amount_minor,
            currency=self._currency,
            receipt=receipt,
            metadata=metadata,
        )
        logger.info("Payment order %s created for user %s (%s)", order.id, command.user_id, receipt)

        return CreatePaymentOrderOutput(
            order_id=order.id,
            client_secret=order.client_secret,
            amount=amount,
            amount_minor=amount_minor,
            currency=self._currency,
            publishable_key=self._publishable_key,
            plan_name=plan.name,
            is_upgrade=command.is_upgrade,
            receipt=receipt,
        )
