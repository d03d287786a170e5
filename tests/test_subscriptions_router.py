from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from streamflix.api.deps import (
    get_cancel_subscription_use_case,
    get_create_payment_order_use_case,
    get_current_user,
    get_list_due_renewals_use_case,
    get_list_plans_use_case,
    get_my_subscription_use_case,
    get_quote_upgrade_use_case,
    get_verify_payment_use_case,
)
from streamflix.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from streamflix.application.use_cases.create_payment_order import CreatePaymentOrderUseCase
from streamflix.application.use_cases.get_my_subscription import GetMySubscriptionUseCase
from streamflix.application.use_cases.list_due_renewals import ListDueRenewalsUseCase
from streamflix.application.use_cases.list_plans import ListPlansUseCase
from streamflix.application.use_cases.quote_upgrade import QuoteUpgradeUseCase
from streamflix.application.use_cases.verify_payment import VerifyPaymentUseCase
from streamflix.domain.entities.user import User
from streamflix.main import app
from tests.fakes import NOW, FakePaymentGateway, FakeSubscriptionsPort, make_plan, make_subscription


def _user(role: str = "user") -> User:
    return User(
        id="user-000001",
        name="Alice",
        email="alice@example.com",
        role=role,
        is_active=True,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


def _port(**kwargs) -> FakeSubscriptionsPort:
    return FakeSubscriptionsPort(
        plans=[
            make_plan("basic-monthly", type="basic", billing_cycle="monthly", price="199"),
            make_plan("advance-monthly", type="advance", billing_cycle="monthly", price="499"),
        ],
        **kwargs,
    )


def _client(role: str = "user") -> TestClient:
    app.dependency_overrides[get_current_user] = lambda: _user(role)
    return TestClient(app)


def test_list_plans_returns_plans_sorted_by_price():
    port = _port()
    app.dependency_overrides[get_list_plans_use_case] = lambda: ListPlansUseCase(subscriptions_port=port)

    response = _client().get("/v1/subscriptions/plans")

    assert response.status_code == 200
    payload = response.json()
    assert [plan["id"] for plan in payload] == ["basic-monthly", "advance-monthly"]
    assert payload[0]["price"] == "199"
    assert payload[0]["features"] == ["HD streaming"]

    app.dependency_overrides.clear()


def test_upgrade_quote_returns_amount_and_reason():
    port = _port(subscriptions=[make_subscription(start_date=NOW - timedelta(days=10))])
    app.dependency_overrides[get_quote_upgrade_use_case] = lambda: QuoteUpgradeUseCase(
        subscriptions_port=port,
        clock=lambda: NOW,
    )

    response = _client().post("/v1/subscriptions/upgrade", json={"new_plan_id": "advance-monthly"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["can_upgrade"] is True
    assert payload["upgrade_amount"] == "698"
    assert payload["reason"] == "Upgrade after 5 days: current month charge + new plan"
    assert payload["days_since_subscription"] == 10
    assert payload["new_plan"]["name"] == "Advance Monthly"

    app.dependency_overrides.clear()


def test_upgrade_quote_maps_domain_errors_to_http_status():
    port = _port(subscriptions=[make_subscription(plan_id="advance-monthly", start_date=NOW)])
    app.dependency_overrides[get_quote_upgrade_use_case] = lambda: QuoteUpgradeUseCase(
        subscriptions_port=port,
        clock=lambda: NOW,
    )
    client = _client()

    rejected = client.post("/v1/subscriptions/upgrade", json={"new_plan_id": "basic-monthly"})
    missing = client.post("/v1/subscriptions/upgrade", json={"new_plan_id": "nope"})

    assert rejected.status_code == 400
    assert rejected.json()["detail"].startswith("Invalid upgrade path")
    assert missing.status_code == 404

    app.dependency_overrides.clear()


def test_upgrade_quote_with_future_start_date_is_unprocessable():
    port = _port(subscriptions=[make_subscription(start_date=NOW + timedelta(days=1))])
    app.dependency_overrides[get_quote_upgrade_use_case] = lambda: QuoteUpgradeUseCase(
        subscriptions_port=port,
        clock=lambda: NOW,
    )

    response = _client().post("/v1/subscriptions/upgrade", json={"new_plan_id": "advance-monthly"})

    assert response.status_code == 422

    app.dependency_overrides.clear()


def test_create_order_then_verify_payment_activates_subscription():
    port = _port()
    gateway = FakePaymentGateway()
    app.dependency_overrides[get_create_payment_order_use_case] = lambda: CreatePaymentOrderUseCase(
        subscriptions_port=port,
        payment_gateway=gateway,
        currency="INR",
        publishable_key="pk_test",
        clock=lambda: NOW,
    )
    app.dependency_overrides[get_verify_payment_use_case] = lambda: VerifyPaymentUseCase(
        subscriptions_port=port,
        payment_gateway=gateway,
        clock=lambda: NOW,
    )
    client = _client()

    order = client.post("/v1/subscriptions/create-order", json={"plan_id": "basic-monthly"})
    assert order.status_code == 200
    order_payload = order.json()
    assert order_payload["amount"] == 19900
    assert order_payload["display_amount"] == "199"
    assert order_payload["currency"] == "INR"
    assert order_payload["receipt"].startswith("rcpt_")

    gateway.settle(order_payload["order_id"])
    verify_body = {"order_id": order_payload["order_id"], "plan_id": "basic-monthly"}
    verified = client.post("/v1/subscriptions/verify-payment", json=verify_body)
    replayed = client.post("/v1/subscriptions/verify-payment", json=verify_body)

    assert verified.status_code == 200
    assert verified.json()["message"] == "Subscription activated successfully!"
    assert verified.json()["subscription"]["status"] == "active"
    assert verified.json()["subscription"]["end_date"].startswith("2024-07-15T12:00:00")
    assert replayed.status_code == 409

    app.dependency_overrides.clear()


def test_create_order_without_gateway_is_service_unavailable():
    port = _port()
    app.dependency_overrides[get_create_payment_order_use_case] = lambda: CreatePaymentOrderUseCase(
        subscriptions_port=port,
        payment_gateway=None,
        currency="INR",
        publishable_key=None,
    )

    response = _client().post("/v1/subscriptions/create-order", json={"plan_id": "basic-monthly"})

    assert response.status_code == 503

    app.dependency_overrides.clear()


def test_cancel_and_my_subscription():
    end_date = NOW + timedelta(days=5)
    port = _port(subscriptions=[make_subscription(start_date=NOW - timedelta(days=25), end_date=end_date)])
    app.dependency_overrides[get_cancel_subscription_use_case] = lambda: CancelSubscriptionUseCase(
        subscriptions_port=port,
        currency="INR",
        clock=lambda: NOW,
    )
    app.dependency_overrides[get_my_subscription_use_case] = lambda: GetMySubscriptionUseCase(
        subscriptions_port=port,
        clock=lambda: NOW,
    )
    client = _client()

    cancelled = client.post("/v1/subscriptions/cancel")
    again = client.post("/v1/subscriptions/cancel")
    mine = client.get("/v1/subscriptions/my-subscription")

    assert cancelled.status_code == 200
    assert cancelled.json()["end_date"].startswith("2024-06-20T12:00:00")
    assert again.status_code == 400
    detail = mine.json()["subscription"]
    assert detail["status"] == "cancelled"
    assert detail["auto_renew"] is False
    assert detail["days_remaining"] == 5
    assert detail["plan"]["id"] == "basic-monthly"

    app.dependency_overrides.clear()


def test_check_renewals_requires_admin():
    port = _port(subscriptions=[make_subscription(end_date=NOW + timedelta(hours=3))])
    app.dependency_overrides[get_list_due_renewals_use_case] = lambda: ListDueRenewalsUseCase(
        subscriptions_port=port,
        clock=lambda: NOW,
    )

    forbidden = _client(role="user").post("/v1/subscriptions/check-renewals")
    allowed = _client(role="admin").post("/v1/subscriptions/check-renewals")

    assert forbidden.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["message"] == "Found 1 subscriptions to renew"
    assert allowed.json()["subscriptions"][0]["plan"] == "Basic Monthly"

    app.dependency_overrides.clear()


def test_requests_without_bearer_token_are_rejected():
    app.dependency_overrides.clear()
    port = _port()
    app.dependency_overrides[get_list_plans_use_case] = lambda: ListPlansUseCase(subscriptions_port=port)
    client = TestClient(app)

    response = client.get("/v1/subscriptions/plans", headers={"Authorization": "Token abc"})

    assert response.status_code == 401

    app.dependency_overrides.clear()
