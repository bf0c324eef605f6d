"""Helpers shared by test modules: seeding, auth headers, Paystack payloads."""

import json
import uuid

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weightwise.auth.jwt import create_token_pair
from weightwise.auth.passwords import hash_password
from weightwise.billing.signature import compute_signature
from weightwise.config import settings
from weightwise.models.subscription import Subscription
from weightwise.models.user import User

PAYSTACK_TEST_BASE_URL = "https://api.paystack.test"


class PaystackRecorder:
    """Records requests sent to the mocked Paystack API and replies on demand."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: dict = {}
        self.raise_error: Exception | None = None

    def reply(self, status_code: int = 200, body: dict | None = None) -> None:
        self.status_code = status_code
        self.body = body or {}

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if self.body:
            return httpx.Response(self.status_code, json=self.body)
        payload = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "status": True,
                "message": "Authorization URL created",
                "data": {
                    "authorization_url": f"https://checkout.paystack.com/{payload['reference']}",
                    "access_code": "ac_test_123",
                    "reference": payload["reference"],
                },
            },
        )


async def create_user(
    db_session: AsyncSession,
    plan: str = "free",
    status: str = "active",
    billing_cycle: str | None = None,
    email: str | None = None,
    with_subscription: bool = True,
) -> User:
    """Insert a user (and subscription) and commit so other sessions see it."""
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=email if email is not None else f"member-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name="Test Member",
        is_active=True,
        email_verified=True,
    )
    db_session.add(user)
    await db_session.flush()

    if with_subscription:
        db_session.add(
            Subscription(
                user_id=user.id,
                plan=plan,
                status=status,
                billing_cycle=billing_cycle,
            )
        )
    await db_session.commit()
    return user


def auth_headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


async def load_subscription(session_factory, user_id: uuid.UUID) -> Subscription | None:
    """Read the subscription through a fresh session (no stale identity map)."""
    async with session_factory() as session:
        result = await session.execute(
            select(Subscription).where(Subscription.user_id == user_id)
        )
        return result.scalar_one_or_none()


def charge_success_payload(
    user_id: str | None,
    billing_cycle: str | None = "monthly",
    reference: str | None = "PRO_MONTHLY_ref_1700000000000",
    direct: bool = True,
    custom_fields: bool = True,
    currency: str | None = "KES",
    transaction_id: int = 4099260516,
) -> dict:
    """Build a Paystack charge.success payload shaped like the real thing."""
    metadata: dict = {}
    if direct:
        if user_id is not None:
            metadata["userId"] = user_id
        metadata["plan"] = "premium"
        if billing_cycle is not None:
            metadata["billingCycle"] = billing_cycle
    if custom_fields:
        fields = [{"display_name": "Plan", "variable_name": "plan", "value": "premium"}]
        if user_id is not None:
            fields.append({"display_name": "User ID", "variable_name": "user_id", "value": user_id})
        if billing_cycle is not None:
            fields.append(
                {"display_name": "Billing Cycle", "variable_name": "billing_cycle", "value": billing_cycle}
            )
        metadata["custom_fields"] = fields

    data: dict = {
        "id": transaction_id,
        "status": "success",
        "amount": 39000,
        "metadata": metadata,
    }
    if reference is not None:
        data["reference"] = reference
    if currency is not None:
        data["currency"] = currency
    return {"event": "charge.success", "data": data}


def signed(payload: dict | bytes, secret: str | None = None) -> tuple[bytes, dict[str, str]]:
    """Return (raw body, headers) with a valid x-paystack-signature."""
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    signature = compute_signature(body, secret or settings.paystack_webhook_secret)
    return body, {"x-paystack-signature": signature, "content-type": "application/json"}
