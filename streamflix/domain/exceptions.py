from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class InvalidUpgradeInputError(DomainError):
    """Subscription or plan data cannot be priced."""


class PlanNotFoundError(DomainError):
    """Requested plan does not exist or is inactive."""


class SubscriptionStateError(DomainError):
    """Subscription is not in a state that allows the operation."""


class BillingError(DomainError):
    """Payment gateway call failed or returned unusable data."""


class PaymentGatewayUnavailableError(DomainError):
    """Payment gateway is not configured."""


class PaymentVerificationError(DomainError):
    """Payment order did not succeed or does not match the request."""


class PaymentConflictError(DomainError):
    """Payment was already applied to a subscription."""


class EmailAlreadyExistsError(DomainError):
    """Email is already registered."""


class InvalidCredentialsError(DomainError):
    """Email or password do not match."""


class UserInactiveError(DomainError):
    """User account is disabled."""


class UpgradeRejectedError(DomainError):
    """Requested plan change is not an allowed upgrade."""


class SubscriptionConflictError(DomainError):
    """Subscription changed between read and write."""
