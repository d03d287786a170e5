from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from streamflix.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from streamflix.application.use_cases.create_payment_order import CreatePaymentOrderUseCase
from streamflix.application.use_cases.expire_subscriptions import ExpireSubscriptionsUseCase
from streamflix.application.use_cases.get_my_subscription import GetMySubscriptionUseCase
from streamflix.application.use_cases.list_due_renewals import ListDueRenewalsUseCase
from streamflix.application.use_cases.list_plans import ListPlansUseCase
from streamflix.application.use_cases.login_local import LoginLocalUseCase
from streamflix.application.use_cases.quote_upgrade import QuoteUpgradeUseCase
from streamflix.application.use_cases.reactivate_subscription import ReactivateSubscriptionUseCase
from streamflix.application.use_cases.register_user import RegisterUserUseCase
from streamflix.application.use_cases.renew_subscriptions import RenewSubscriptionsUseCase
from streamflix.application.use_cases.verify_payment import VerifyPaymentUseCase
from streamflix.domain.entities.user import User
from streamflix.infrastructure.db.engine import get_engine
from streamflix.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from streamflix.infrastructure.db.repositories.subscriptions_repository import SqlSubscriptionsRepository
from streamflix.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def _get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


def _get_subscriptions_repository() -> SqlSubscriptionsRepository:
    return SqlSubscriptionsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> "PasswordHasher":
    from streamflix.infrastructure.security.password_hasher import PasswordHasher

    return PasswordHasher()


@lru_cache(maxsize=1)
def _get_token_service() -> "JwtTokenService":
    from streamflix.infrastructure.security.token_service import JwtTokenService

    settings = get_settings()
    if not settings.jwt_secret:
        raise HTTPException(status_code=500, detail="JWT_SECRET is required.")
    return JwtTokenService(
        jwt_secret=settings.jwt_secret,
        access_ttl_minutes=settings.jwt_access_ttl_minutes,
    )


@lru_cache(maxsize=1)
def _get_payment_gateway() -> "StripeClient | None":
    from streamflix.infrastructure.clients.stripe_client import StripeClient

    settings = get_settings()
    if not settings.stripe_secret_key:
        return None
    return StripeClient(secret_key=settings.stripe_secret_key)


def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(
        accounts_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
    )


def get_login_local_use_case() -> LoginLocalUseCase:
    return LoginLocalUseCase(
        accounts_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        token_port=_get_token_service(),
    )


def get_list_plans_use_case() -> ListPlansUseCase:
    return ListPlansUseCase(subscriptions_port=_get_subscriptions_repository())


def get_quote_upgrade_use_case() -> QuoteUpgradeUseCase:
    return QuoteUpgradeUseCase(subscriptions_port=_get_subscriptions_repository())


def get_create_payment_order_use_case() -> CreatePaymentOrderUseCase:
    settings = get_settings()
    return CreatePaymentOrderUseCase(
        subscriptions_port=_get_subscriptions_repository(),
        payment_gateway=_get_payment_gateway(),
        currency=settings.billing_currency,
        publishable_key=settings.stripe_publishable_key or None,
    )


def get_verify_payment_use_case() -> VerifyPaymentUseCase:
    return VerifyPaymentUseCase(
        subscriptions_port=_get_subscriptions_repository(),
        payment_gateway=_get_payment_gateway(),
    )


def get_cancel_subscription_use_case() -> CancelSubscriptionUseCase:
    return CancelSubscriptionUseCase(
        subscriptions_port=_get_subscriptions_repository(),
        currency=get_settings().billing_currency,
    )


def get_reactivate_subscription_use_case() -> ReactivateSubscriptionUseCase:
    return ReactivateSubscriptionUseCase(subscriptions_port=_get_subscriptions_repository())


def get_my_subscription_use_case() -> GetMySubscriptionUseCase:
    return GetMySubscriptionUseCase(subscriptions_port=_get_subscriptions_repository())


def get_list_due_renewals_use_case() -> ListDueRenewalsUseCase:
    return ListDueRenewalsUseCase(subscriptions_port=_get_subscriptions_repository())


def get_renew_subscriptions_use_case() -> RenewSubscriptionsUseCase:
    return RenewSubscriptionsUseCase(subscriptions_port=_get_subscriptions_repository())


def get_expire_subscriptions_use_case() -> ExpireSubscriptionsUseCase:
    return ExpireSubscriptionsUseCase(subscriptions_port=_get_subscriptions_repository())


def get_current_user(
    authorization: str = Header(...),
) -> User:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header.")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token.")

    token_service = _get_token_service()
    accounts_port = _get_accounts_repository()

    try:
        payload = token_service.decode_access_token(token=token)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    user = accounts_port.get_user_by_id(user_id=payload.user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found.")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive.")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="Admin access required.")
    return user
