"""Payment service — start a Paystack checkout for the premium upgrade."""

import logging
import math
import time
from dataclasses import dataclass
from typing import Any

from weightwise.billing.currency import to_minor_units
from weightwise.billing.errors import BillingConfigurationError, InvalidPaymentRequestError
from weightwise.billing.paystack_client import PaystackClient
from weightwise.billing.plans import PREMIUM_PLAN, is_valid_billing_cycle
from weightwise.config import Settings, settings as default_settings
from weightwise.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentInitialization:
    """What the client needs to redirect the user to Paystack checkout."""

    authorization_url: str
    access_code: str | None
    reference: str


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def build_reference(billing_cycle: str, user_id: str, epoch_millis: int | None = None) -> str:
    """``PRO_<CYCLE>_<userId>_<epochMillis>``, unique per initiation attempt."""
    if epoch_millis is None:
        epoch_millis = _epoch_millis()
    return f"PRO_{billing_cycle.upper()}_{user_id}_{epoch_millis}"


def build_metadata(user_id: str, billing_cycle: str) -> dict[str, Any]:
    """Metadata carried through Paystack and echoed back in the webhook.

    Direct keys are what the webhook reads first; ``custom_fields`` is what
    the Paystack dashboard displays.
    """
    return {
        "userId": user_id,
        "plan": PREMIUM_PLAN,
        "billingCycle": billing_cycle,
        "custom_fields": [
            {"display_name": "User ID", "variable_name": "user_id", "value": user_id},
            {"display_name": "Plan", "variable_name": "plan", "value": PREMIUM_PLAN},
            {"display_name": "Billing Cycle", "variable_name": "billing_cycle", "value": billing_cycle},
        ],
    }


def _validate_request(
    user: User, amount: Any, currency: Any, billing_cycle: Any, config: Settings
) -> None:
    if not user.email:
        raise InvalidPaymentRequestError("User email not found.")

    if (
        isinstance(amount, bool)
        or not isinstance(amount, (int, float))
        or not math.isfinite(amount)
        or amount <= 0
    ):
        raise InvalidPaymentRequestError(
            f"Amount must be a positive number in {config.billing_currency}."
        )

    if currency != config.billing_currency:
        raise InvalidPaymentRequestError(
            f"Invalid currency {currency!r}. Expected {config.billing_currency}."
        )

    if not is_valid_billing_cycle(billing_cycle):
        raise InvalidPaymentRequestError("Invalid billing cycle specified.")


async def initiate_payment(
    user: User,
    amount: Any,
    currency: str,
    billing_cycle: str,
    client: PaystackClient,
    config: Settings = default_settings,
) -> PaymentInitialization:
    """Create a pending Paystack transaction for the premium plan.

    Raises:
        BillingConfigurationError: If the Paystack secret key is missing.
        InvalidPaymentRequestError: For a bad amount, currency, cycle or a
            user without an email address.
        PaymentProviderError: If Paystack rejects the request or is unreachable.
    """
    if not client.is_configured:
        logger.error("Paystack secret key missing; cannot initiate payment")
        raise BillingConfigurationError("Payment gateway configuration error.")

    try:
        _validate_request(user, amount, currency, billing_cycle, config)
    except InvalidPaymentRequestError as e:
        logger.warning("Rejected payment initiation for user %s: %s", user.id, e.message)
        raise

    user_id = str(user.id)
    amount_minor = to_minor_units(amount, currency, config.currency_minor_units)
    reference = build_reference(billing_cycle, user_id)
    logger.info(
        "Converting amount for Paystack: %s %s -> %s minor units",
        amount,
        currency,
        amount_minor,
    )

    payload: dict[str, Any] = {
        "email": user.email,
        "amount": amount_minor,
        "currency": currency,
        "reference": reference,
        "metadata": build_metadata(user_id, billing_cycle),
    }
    if config.paystack_callback_url:
        payload["callback_url"] = config.paystack_callback_url

    data = await client.initialize_transaction(payload)
    return PaymentInitialization(
        authorization_url=data["authorization_url"],
        access_code=data.get("access_code"),
        reference=data.get("reference") or reference,
    )
