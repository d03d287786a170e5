from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from streamflix.api.deps import (
    get_cancel_subscription_use_case,
    get_create_payment_order_use_case,
    get_current_user,
    get_list_due_renewals_use_case,
    get_list_plans_use_case,
    get_my_subscription_use_case,
    get_quote_upgrade_use_case,
    get_reactivate_subscription_use_case,
    get_verify_payment_use_case,
    require_admin,
)
from streamflix.api.schemas.subscriptions import (
    CancelSubscriptionResponse,
    CheckRenewalsResponse,
    CreateOrderRequest,
    CreateOrderResponse,
    DueRenewalResponse,
    MySubscriptionDetail,
    MySubscriptionResponse,
    PlanResponse,
    ReactivateSubscriptionResponse,
    SubscriptionResponse,
    UpgradePlanSummary,
    UpgradeQuoteRequest,
    UpgradeQuoteResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from streamflix.application.dto.billing import (
    CreatePaymentOrderInput,
    QuoteUpgradeInput,
    VerifyPaymentInput,
)
from streamflix.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from streamflix.application.use_cases.create_payment_order import CreatePaymentOrderUseCase
from streamflix.application.use_cases.get_my_subscription import GetMySubscriptionUseCase
from streamflix.application.use_cases.list_due_renewals import ListDueRenewalsUseCase
from streamflix.application.use_cases.list_plans import ListPlansUseCase
from streamflix.application.use_cases.quote_upgrade import QuoteUpgradeUseCase
from streamflix.application.use_cases.reactivate_subscription import ReactivateSubscriptionUseCase
from streamflix.application.use_cases.verify_payment import VerifyPaymentUseCase
from streamflix.domain.entities.plan import SubscriptionPlan
from streamflix.domain.entities.subscription import UserSubscription
from streamflix.domain.entities.user import User
from streamflix.domain.exceptions import (
    BillingError,
    DomainError,
    InvalidUpgradeInputError,
    PaymentConflictError,
    PaymentGatewayUnavailableError,
    PaymentVerificationError,
    PlanNotFoundError,
    SubscriptionConflictError,
    SubscriptionStateError,
    UpgradeRejectedError,
)


router = APIRouter(prefix="/v1/subscriptions")

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (PlanNotFoundError, 404),
    (SubscriptionStateError, 400),
    (UpgradeRejectedError, 400),
    (InvalidUpgradeInputError, 422),
    (PaymentVerificationError, 400),
    (PaymentConflictError, 409),
    (SubscriptionConflictError, 409),
    (PaymentGatewayUnavailableError, 503),
    (BillingError, 400),
)


def _http_error(exc: DomainError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail="Server error.")


def _plan_response(plan: SubscriptionPlan) -> PlanResponse:
    return PlanResponse(
        id=plan.id,
        name=plan.name,
        type=plan.type,
        billing_cycle=plan.billing_cycle,
        price=plan.price,
        currency=plan.currency,
        features=list(plan.features),
        video_quality=plan.video_quality,
        simultaneous_streams=plan.simultaneous_streams,
        download_limit=plan.download_limit,
    )


def _subscription_response(subscription: UserSubscription) -> SubscriptionResponse:
    return SubscriptionResponse(
        plan_id=subscription.plan_id,
        status=subscription.status,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        auto_renew=subscription.auto_renew,
    )


@router.get("/plans", response_model=list[PlanResponse])
def list_plans(
    _current_user: User = Depends(get_current_user),
    use_case: ListPlansUseCase = Depends(get_list_plans_use_case),
):
    return [_plan_response(plan) for plan in use_case.execute()]


@router.post("/upgrade", response_model=UpgradeQuoteResponse)
def quote_upgrade(
    req: UpgradeQuoteRequest,
    current_user: User = Depends(get_current_user),
    use_case: QuoteUpgradeUseCase = Depends(get_quote_upgrade_use_case),
):
    try:
        output = use_case.execute(QuoteUpgradeInput(user_id=current_user.id, new_plan_id=req.new_plan_id))
    except DomainError as exc:
        raise _http_error(exc) from exc

    return UpgradeQuoteResponse(
        upgrade_amount=output.upgrade_amount,
        reason=output.reason,
        days_since_subscription=output.days_since_subscription,
        new_plan=UpgradePlanSummary(
            name=output.new_plan.name,
            price=output.new_plan.price,
            features=list(output.new_plan.features),
        ),
    )


@router.post("/create-order", response_model=CreateOrderResponse)
def create_order(
    req: CreateOrderRequest,
    current_user: User = Depends(get_current_user),
    use_case: CreatePaymentOrderUseCase = Depends(get_create_payment_order_use_case),
):
    try:
        output = use_case.execute(
            CreatePaymentOrderInput(
                user_id=current_user.id,
                plan_id=req.plan_id,
                is_upgrade=req.is_upgrade,
            )
        )
    except DomainError as exc:
        raise _http_error(exc) from exc

    return CreateOrderResponse(
        order_id=output.order_id,
        client_secret=output.client_secret,
        amount=output.amount_minor,
        display_amount=output.amount,
        currency=output.currency,
        publishable_key=output.publishable_key,
        plan_name=output.plan_name,
        is_upgrade=output.is_upgrade,
        receipt=output.receipt,
    )


@router.post("/verify-payment", response_model=VerifyPaymentResponse)
def verify_payment(
    req: VerifyPaymentRequest,
    current_user: User = Depends(get_current_user),
    use_case: VerifyPaymentUseCase = Depends(get_verify_payment_use_case),
):
    try:
        output = use_case.execute(
            VerifyPaymentInput(
                user_id=current_user.id,
                order_id=req.order_id,
                plan_id=req.plan_id,
            )
        )
    except DomainError as exc:
        raise _http_error(exc) from exc

    return VerifyPaymentResponse(
        message="Subscription activated successfully!",
        subscription=_subscription_response(output.subscription),
    )


@router.post("/cancel", response_model=CancelSubscriptionResponse)
def cancel_subscription(
    current_user: User = Depends(get_current_user),
    use_case: CancelSubscriptionUseCase = Depends(get_cancel_subscription_use_case),
):
    try:
        output = use_case.execute(user_id=current_user.id)
    except DomainError as exc:
        raise _http_error(exc) from exc

    return CancelSubscriptionResponse(
        message=(
            "Subscription cancelled successfully. "
            "You can continue using the service until the end of your billing period."
        ),
        end_date=output.end_date,
    )


@router.post("/reactivate", response_model=ReactivateSubscriptionResponse)
def reactivate_subscription(
    current_user: User = Depends(get_current_user),
    use_case: ReactivateSubscriptionUseCase = Depends(get_reactivate_subscription_use_case),
):
    try:
        subscription = use_case.execute(user_id=current_user.id)
    except DomainError as exc:
        raise _http_error(exc) from exc

    return ReactivateSubscriptionResponse(
        message="Subscription reactivated successfully",
        subscription=_subscription_response(subscription),
    )


@router.post("/check-renewals", response_model=CheckRenewalsResponse)
def check_renewals(
    _admin: User = Depends(require_admin),
    use_case: ListDueRenewalsUseCase = Depends(get_list_due_renewals_use_case),
):
    due = use_case.execute()
    return CheckRenewalsResponse(
        message=f"Found {len(due)} subscriptions to renew",
        subscriptions=[
            DueRenewalResponse(email=item.email, plan=item.plan_name, end_date=item.end_date)
            for item in due
        ],
    )


@router.get("/my-subscription", response_model=MySubscriptionResponse)
def my_subscription(
    current_user: User = Depends(get_current_user),
    use_case: GetMySubscriptionUseCase = Depends(get_my_subscription_use_case),
):
    output = use_case.execute(user_id=current_user.id)
    return MySubscriptionResponse(
        subscription=MySubscriptionDetail(
            status=output.status,
            plan=_plan_response(output.plan) if output.plan is not None else None,
            start_date=output.start_date,
            end_date=output.end_date,
            auto_renew=output.auto_renew,
            days_remaining=output.days_remaining,
        )
    )
