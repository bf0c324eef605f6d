"""Subscription service — subscriber records, charge reconciliation, entitlement."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weightwise.billing.errors import SubscriberNotFoundError
from weightwise.billing.plans import ACTIVE_STATUS, FREE_PLAN, PREMIUM_PLAN
from weightwise.models.subscription import Subscription
from weightwise.models.user import User

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Current server time as naive UTC (matches the DB columns)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_entitled(subscription: Subscription | None) -> bool:
    """Premium access requires plan "premium" AND status "active", nothing else."""
    if subscription is None:
        return False
    return subscription.plan == PREMIUM_PLAN and subscription.status == ACTIVE_STATUS


async def create_free_subscription(db: AsyncSession, user: User) -> Subscription:
    """Create the initial free-tier record for a newly registered user."""
    subscription = Subscription(user_id=user.id, plan=FREE_PLAN, status=ACTIVE_STATUS)
    db.add(subscription)
    await db.flush()
    return subscription


async def get_or_create_subscription(
    db: AsyncSession, user: User
) -> Subscription:
    """Get existing subscription or create a free-tier one for the user."""
    result = await db.execute(
        select(Subscription).where(Subscription.user_id == user.id)
    )
    subscription = result.scalar_one_or_none()

    if subscription is not None:
        return subscription

    logger.info("Creating free-tier subscription for user %s", user.id)
    return await create_free_subscription(db, user)


async def get_subscription_by_user_id(
    db: AsyncSession, user_id: str | uuid.UUID
) -> Subscription | None:
    """Look up a subscription by the owning user's ID (used by webhooks).

    Returns None for IDs that are not valid UUIDs.
    """
    if not isinstance(user_id, uuid.UUID):
        try:
            user_id = uuid.UUID(str(user_id))
        except ValueError:
            return None

    result = await db.execute(
        select(Subscription).where(Subscription.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def apply_successful_charge(
    db: AsyncSession,
    user_id: str,
    billing_cycle: str,
    reference: str,
    transaction_id: str | None = None,
) -> Subscription:
    """Upgrade the user's record to active premium for a confirmed charge.

    This overwrites the plan fields without looking at the previous status,
    so a redelivered event lands on the same values. When the reference has
    already been applied the row is left untouched. The caller owns the
    transaction.

    Raises:
        SubscriberNotFoundError: If no subscription exists for ``user_id``.
    """
    subscription = await get_subscription_by_user_id(db, user_id)
    if subscription is None:
        raise SubscriberNotFoundError(str(user_id))

    if (
        subscription.last_transaction_ref == reference
        and subscription.billing_cycle == billing_cycle
        and is_entitled(subscription)
    ):
        logger.info(
            "Charge %s already applied to user %s, skipping write",
            reference,
            user_id,
        )
        return subscription

    subscription.plan = PREMIUM_PLAN
    subscription.billing_cycle = billing_cycle
    subscription.status = ACTIVE_STATUS
    subscription.last_transaction_ref = reference
    subscription.last_transaction_id = transaction_id
    subscription.subscription_updated_at = _utcnow()
    await db.flush()

    logger.info(
        "User %s upgraded to %s (%s), ref=%s, transaction=%s",
        user_id,
        PREMIUM_PLAN,
        billing_cycle,
        reference,
        transaction_id,
    )
    return subscription
