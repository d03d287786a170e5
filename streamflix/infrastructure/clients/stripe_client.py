from __future__ import annotations

import stripe

from streamflix.application.dto.billing import PaymentOrder
from streamflix.application.ports.payment_gateway_port import PaymentGatewayPort
from streamflix.domain.exceptions import BillingError


class StripeClient(PaymentGatewayPort):
    """Payment orders backed by Stripe PaymentIntents."""

    def __init__(self, *, secret_key: str):
        stripe.api_key = secret_key

    def create_payment_order(
        self,
        *,
        amount_minor: int,
        currency: str,
        receipt: str,
        metadata: dict[str, str],
    ) -> PaymentOrder:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor,
                currency=currency.lower(),
                description=receipt,
                metadata={**metadata, "receipt": receipt},
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as exc:  # pragma: no cover - external API
            message = getattr(exc, "user_message", None) or str(exc)
            raise BillingError(f"Payment gateway error: {message}") from exc

        return _to_payment_order(intent)

    def get_payment_order(self, *, order_id: str) -> PaymentOrder:
        try:
            intent = stripe.PaymentIntent.retrieve(order_id)
        except stripe.InvalidRequestError as exc:  # pragma: no cover - external API
            raise BillingError("Payment order not found.") from exc
        except stripe.StripeError as exc:  # pragma: no cover - external API
            raise BillingError("Failed to fetch payment order.") from exc

        return _to_payment_order(intent)


def _to_payment_order(intent) -> PaymentOrder:
    intent_id = getattr(intent, "id", None)
    if not intent_id:
        raise BillingError("Payment gateway response is incomplete.")

    raw_metadata = _as_dict(getattr(intent, "metadata", None))
    return PaymentOrder(
        id=str(intent_id),
        status=str(getattr(intent, "status", "")),
        amount_minor=int(getattr(intent, "amount", 0) or 0),
        currency=str(getattr(intent, "currency", "") or ""),
        client_secret=getattr(intent, "client_secret", None),
        metadata={str(key): str(value) for key, value in raw_metadata.items()},
    )


def _as_dict(value) -> dict:
    if not value:
        return {}
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(value)
