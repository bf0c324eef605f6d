"""Paystack webhook event handlers — credit confirmed charges."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from weightwise.billing.events import ChargeSuccess, check_currency
from weightwise.config import settings
from weightwise.models.subscription import Subscription
from weightwise.services.subscription_service import apply_successful_charge

logger = logging.getLogger(__name__)


async def handle_charge_success(
    db: AsyncSession,
    charge: ChargeSuccess,
    expected_currency: str | None = None,
) -> Subscription:
    """Handle charge.success — upgrade the paying user to premium.

    A currency other than the configured one is logged but still credited;
    Paystack may settle through a different regional currency.
    """
    expected_currency = expected_currency or settings.billing_currency
    if not check_currency(charge, expected_currency):
        logger.warning(
            "Charge %s for user %s settled in %s, expected %s; crediting anyway",
            charge.reference,
            charge.user_id,
            charge.currency,
            expected_currency,
        )

    logger.info(
        "Processing successful charge for user %s: plan=%s, cycle=%s, ref=%s, transaction=%s",
        charge.user_id,
        charge.plan,
        charge.billing_cycle,
        charge.reference,
        charge.transaction_id,
    )

    # Only one paid tier exists, so the plan string in metadata is informational.
    return await apply_successful_charge(
        db,
        user_id=charge.user_id,
        billing_cycle=charge.billing_cycle,
        reference=charge.reference,
        transaction_id=charge.transaction_id,
    )
