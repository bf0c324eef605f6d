"""Billing API endpoints — plans, subscription state, and Paystack checkout."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from weightwise.api.deps import (
    get_current_active_user,
    get_paystack_client,
    get_user_subscription,
    require_premium,
)
from weightwise.billing.errors import (
    BillingConfigurationError,
    InvalidPaymentRequestError,
    PaymentProviderError,
)
from weightwise.billing.paystack_client import PaystackClient
from weightwise.billing.plans import PLANS
from weightwise.config import settings
from weightwise.models.subscription import Subscription
from weightwise.models.user import User
from weightwise.schemas.billing import (
    InitializePaymentRequest,
    InitializePaymentResponse,
    PlanResponse,
    PlansListResponse,
    SubscriptionResponse,
)
from weightwise.services.payment_service import initiate_payment
from weightwise.services.subscription_service import is_entitled

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])


def _subscription_response(subscription: Subscription) -> SubscriptionResponse:
    return SubscriptionResponse(
        plan=subscription.plan,
        status=subscription.status,
        billing_cycle=subscription.billing_cycle,
        last_transaction_ref=subscription.last_transaction_ref,
        subscription_updated_at=subscription.subscription_updated_at,
        entitled=is_entitled(subscription),
    )


@router.get("/plans", response_model=PlansListResponse)
async def list_plans() -> PlansListResponse:
    """List available plans (public — no auth required)."""
    return PlansListResponse(
        plans=[
            PlanResponse(
                name=p.name,
                display_name=p.display_name,
                currency=settings.billing_currency,
                price_monthly=p.price_monthly,
                price_yearly=p.price_yearly,
                has_ai_advice=p.has_ai_advice,
                has_weekly_report=p.has_weekly_report,
            )
            for p in PLANS.values()
        ]
    )


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(
    subscription: Subscription = Depends(get_user_subscription),
) -> SubscriptionResponse:
    """Get the current plan, billing cycle, and premium entitlement."""
    return _subscription_response(subscription)


@router.get("/premium-check", response_model=SubscriptionResponse)
async def premium_check(
    subscription: Subscription = Depends(require_premium),
) -> SubscriptionResponse:
    """Succeeds only for users entitled to premium features."""
    return _subscription_response(subscription)


@router.post("/initialize", response_model=InitializePaymentResponse)
async def initialize_payment(
    body: InitializePaymentRequest,
    current_user: User = Depends(get_current_active_user),
    client: PaystackClient = Depends(get_paystack_client),
) -> InitializePaymentResponse:
    """Create a Paystack transaction for the premium upgrade and return its checkout URL."""
    try:
        result = await initiate_payment(
            user=current_user,
            amount=body.amount,
            currency=body.currency,
            billing_cycle=body.billing_cycle,
            client=client,
        )
    except InvalidPaymentRequestError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": e.code, "message": e.message},
        ) from e
    except BillingConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": e.code, "message": "Payment gateway configuration error."},
        ) from e
    except PaymentProviderError as e:
        logger.error("Paystack initialization error for user %s: %s", current_user.id, e.message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": e.code, "message": e.message},
        ) from e

    return InitializePaymentResponse(
        authorization_url=result.authorization_url,
        access_code=result.access_code,
        reference=result.reference,
    )
