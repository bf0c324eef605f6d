"""Billing exceptions, each tagged with the error category reported to callers."""


class BillingError(Exception):
    """Base class for billing failures."""

    code = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidPaymentRequestError(BillingError):
    """Caller supplied a bad amount, currency, billing cycle, or identity."""

    code = "invalid-argument"


class BillingConfigurationError(BillingError):
    """A required Paystack key or billing setting is missing."""


class WebhookConfigurationError(BillingConfigurationError):
    """The webhook signing secret is not configured."""


class PaymentProviderError(BillingError):
    """Paystack rejected the request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubscriberNotFoundError(BillingError):
    """No subscription row exists for the user referenced by a charge."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No subscription found for user {user_id}")
        self.user_id = user_id
