"""Plan gating dependencies — enforce premium entitlement on routes."""

import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from weightwise.auth.dependencies import get_current_active_user
from weightwise.database import get_db
from weightwise.models.subscription import Subscription
from weightwise.models.user import User
from weightwise.services.subscription_service import get_or_create_subscription, is_entitled

logger = logging.getLogger(__name__)


async def get_user_subscription(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_active_user),
) -> Subscription:
    """Fetch (or lazily create) the authenticated user's subscription."""
    return await get_or_create_subscription(db, user)


async def require_premium(
    subscription: Subscription = Depends(get_user_subscription),
) -> Subscription:
    """Raise 402 unless the user is on an active premium plan."""
    if not is_entitled(subscription):
        logger.info(
            "Premium feature denied for user %s (plan=%s, status=%s)",
            subscription.user_id,
            subscription.plan,
            subscription.status,
        )
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "message": "This feature requires an active Premium plan.",
                "plan": subscription.plan,
                "status": subscription.status,
                "upgrade_url": "/api/v1/billing/initialize",
            },
        )
    return subscription
