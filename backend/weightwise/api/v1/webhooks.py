"""Paystack webhook endpoint — receives and processes Paystack events."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from weightwise.api.deps import get_session_factory
from weightwise.billing.events import EventOutcome, interpret_event
from weightwise.billing.signature import SIGNATURE_HEADER, compute_signature, verify_signature
from weightwise.billing.webhooks import handle_charge_success
from weightwise.config import settings
from weightwise.schemas.billing import WebhookAckResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])


@router.post("/paystack", response_model=WebhookAckResponse)
async def paystack_webhook(
    request: Request,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> WebhookAckResponse:
    """Receive and process Paystack webhook events.

    Anything that passes signature verification is answered with 200, even
    when it cannot be applied: Paystack redelivers on non-2xx, and a charge
    that failed to apply is fixed by hand from the error log.
    """
    # 1. Fail closed without a secret
    secret = settings.paystack_webhook_secret
    if not secret:
        logger.error("Paystack webhook secret not configured; rejecting webhook")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook configuration error",
        )

    # 2. Verify signature over the raw bytes
    payload = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)
    if not verify_signature(payload, signature, secret):
        logger.warning(
            "Invalid Paystack webhook signature (received=%s, calculated=%s)",
            signature,
            compute_signature(payload, secret),
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        )

    # 3. Parse and interpret
    try:
        body = json.loads(payload)
    except ValueError as e:
        logger.warning("Invalid Paystack webhook payload")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload",
        ) from e
    if not isinstance(body, dict):
        logger.warning("Paystack webhook payload is not a JSON object")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload",
        )

    event = interpret_event(body)

    if event.outcome is EventOutcome.IGNORED:
        logger.info("Ignoring Paystack event type: %s", event.event_type)
        return WebhookAckResponse(status="ignored")

    if event.outcome is EventOutcome.MALFORMED:
        logger.error(
            "Paid charge could not be credited: %s. Context: %s",
            event.reason,
            event.context,
        )
        return WebhookAckResponse(status="malformed")

    charge = event.charge

    # 4. Reconcile in our own session (webhook has no auth context)
    async with session_factory() as db:
        try:
            await handle_charge_success(db, charge)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception(
                "Failed to apply charge %s for user %s; manual reconciliation required",
                charge.reference,
                charge.user_id,
            )
            return WebhookAckResponse(status="failed")

    return WebhookAckResponse(status="processed")
