from __future__ import annotations

from typing import Protocol

from streamflix.application.dto.billing import PaymentOrder


class PaymentGatewayPort(Protocol):
    def create_payment_order(
        self,
        *,
        amount_minor: int,
        currency: str,
        receipt: str,
        metadata: dict[str, str],
    ) -> PaymentOrder:
        ...

    def get_payment_order(self, *, order_id: str) -> PaymentOrder:
        ...
