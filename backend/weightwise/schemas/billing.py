"""Pydantic v2 request/response schemas for billing endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Request schemas ---


class InitializePaymentRequest(BaseModel):
    """Request to start a Paystack checkout for the premium plan."""

    model_config = ConfigDict(populate_by_name=True)

    # Major units, e.g. 390 for KES 390.00. Left unconverted so a boolean or
    # numeric string reaches initiate_payment and is rejected as invalid-argument.
    amount: Any = None
    currency: str
    billing_cycle: str = Field(alias="billingCycle")  # "monthly" or "yearly"


# --- Response schemas ---


class InitializePaymentResponse(BaseModel):
    """Paystack checkout details returned to the frontend for redirect."""

    authorization_url: str
    access_code: str | None = None
    reference: str


class PlanResponse(BaseModel):
    """Plan details for display."""

    name: str
    display_name: str
    currency: str
    price_monthly: float
    price_yearly: float
    has_ai_advice: bool
    has_weekly_report: bool


class PlansListResponse(BaseModel):
    """All available plans."""

    plans: list[PlanResponse]


class SubscriptionResponse(BaseModel):
    """Subscription state for the authenticated user."""

    plan: str
    status: str
    billing_cycle: str | None = None
    last_transaction_ref: str | None = None
    subscription_updated_at: datetime | None = None
    entitled: bool


class WebhookAckResponse(BaseModel):
    """Acknowledgement returned to Paystack."""

    status: str
