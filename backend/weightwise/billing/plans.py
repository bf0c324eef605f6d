"""Plan definitions — the free tier and the single paid tier."""

from dataclasses import dataclass

from weightwise.config import settings

FREE_PLAN = "free"
PREMIUM_PLAN = "premium"
ACTIVE_STATUS = "active"

BILLING_CYCLES: tuple[str, ...] = ("monthly", "yearly")


@dataclass(frozen=True)
class Plan:
    """Display and pricing data for a plan."""

    name: str
    display_name: str
    price_monthly: float  # major units of settings.billing_currency
    price_yearly: float
    # Catalogue flags for the upgrade page; the features live in the app and
    # are gated there through is_entitled, not per flag.
    has_ai_advice: bool
    has_weekly_report: bool


PLANS: dict[str, Plan] = {
    FREE_PLAN: Plan(
        name=FREE_PLAN,
        display_name="Free",
        price_monthly=0.0,
        price_yearly=0.0,
        has_ai_advice=False,
        has_weekly_report=False,
    ),
    PREMIUM_PLAN: Plan(
        name=PREMIUM_PLAN,
        display_name="Premium",
        price_monthly=settings.premium_price_monthly,
        price_yearly=settings.premium_price_yearly,
        has_ai_advice=True,
        has_weekly_report=True,
    ),
}


def get_plan(plan_name: str) -> Plan:
    """Get plan by name. Defaults to free if unknown."""
    return PLANS.get(plan_name, PLANS[FREE_PLAN])


def is_valid_billing_cycle(value: object) -> bool:
    """True for "monthly" or "yearly"."""
    return isinstance(value, str) and value in BILLING_CYCLES
