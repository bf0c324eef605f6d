"""Interpret verified Paystack webhook payloads into billing outcomes.

Everything here is pure: no database, no HTTP, no settings. The webhook
router decides what to do with each outcome.

Paystack echoes back the ``metadata`` we sent at initialization. We send the
user/plan/cycle twice, as direct keys and as ``custom_fields`` rows for the
dashboard, so each value is resolved by trying a fixed list of strategies in
order.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from weightwise.billing.plans import is_valid_billing_cycle

CHARGE_SUCCESS = "charge.success"

# (direct metadata key, custom_fields variable_name)
USER_ID_KEYS = ("userId", "user_id")
PLAN_KEYS = ("plan", "plan")
BILLING_CYCLE_KEYS = ("billingCycle", "billing_cycle")


class EventOutcome(str, Enum):
    IGNORED = "ignored"
    MALFORMED = "malformed"
    SUCCESS = "success"


@dataclass(frozen=True)
class ChargeSuccess:
    """A ``charge.success`` event with every field needed to credit the user."""

    reference: str
    user_id: str
    plan: str
    billing_cycle: str
    transaction_id: str | None = None
    currency: str | None = None


@dataclass(frozen=True)
class InterpretedEvent:
    outcome: EventOutcome
    event_type: str | None
    charge: ChargeSuccess | None = None
    reason: str | None = None
    context: dict[str, Any] = field(default_factory=dict)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _present(value: Any) -> Any:
    """Treat None and blank strings as missing."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _from_direct_field(metadata: dict[str, Any], direct_key: str, variable_name: str) -> Any:
    return _present(metadata.get(direct_key))


def _from_custom_fields(metadata: dict[str, Any], direct_key: str, variable_name: str) -> Any:
    custom_fields = metadata.get("custom_fields")
    if not isinstance(custom_fields, list):
        return None
    for entry in custom_fields:
        if isinstance(entry, dict) and entry.get("variable_name") == variable_name:
            return _present(entry.get("value"))
    return None


MetadataStrategy = Callable[[dict[str, Any], str, str], Any]

# Order matters: direct fields win over the dashboard list.
METADATA_STRATEGIES: tuple[MetadataStrategy, ...] = (
    _from_direct_field,
    _from_custom_fields,
)


def resolve_metadata_value(
    metadata: dict[str, Any],
    keys: tuple[str, str],
    strategies: tuple[MetadataStrategy, ...] = METADATA_STRATEGIES,
) -> Any:
    """Return the first value any strategy finds for ``keys``, or None."""
    direct_key, variable_name = keys
    for strategy in strategies:
        value = strategy(metadata, direct_key, variable_name)
        if value is not None:
            return value
    return None


def _optional_str(value: Any) -> str | None:
    value = _present(value)
    return None if value is None else str(value)


def interpret_event(payload: Any) -> InterpretedEvent:
    """Classify a verified webhook payload.

    Returns:
        ``IGNORED`` for any event other than ``charge.success``;
        ``MALFORMED`` when the reference, user, plan or billing cycle cannot
        be resolved, or the cycle is not monthly/yearly;
        ``SUCCESS`` with a populated :class:`ChargeSuccess` otherwise.
    """
    body = _as_dict(payload)
    event_type = body.get("event")
    if event_type != CHARGE_SUCCESS:
        return InterpretedEvent(
            outcome=EventOutcome.IGNORED,
            event_type=event_type if isinstance(event_type, str) else None,
        )

    data = _as_dict(body.get("data"))
    metadata = _as_dict(data.get("metadata"))

    reference = _optional_str(data.get("reference"))
    user_id = resolve_metadata_value(metadata, USER_ID_KEYS)
    plan = resolve_metadata_value(metadata, PLAN_KEYS)
    billing_cycle = resolve_metadata_value(metadata, BILLING_CYCLE_KEYS)

    context = {
        "reference": reference,
        "user_id": user_id,
        "plan": plan,
        "billing_cycle": billing_cycle,
        "transaction_id": data.get("id"),
        "metadata": data.get("metadata"),
    }

    if reference is None or user_id is None or plan is None or billing_cycle is None:
        return InterpretedEvent(
            outcome=EventOutcome.MALFORMED,
            event_type=event_type,
            reason="Missing reference, userId, plan, or billingCycle",
            context=context,
        )

    if not is_valid_billing_cycle(billing_cycle):
        return InterpretedEvent(
            outcome=EventOutcome.MALFORMED,
            event_type=event_type,
            reason=f"Invalid billing cycle {billing_cycle!r}",
            context=context,
        )

    return InterpretedEvent(
        outcome=EventOutcome.SUCCESS,
        event_type=event_type,
        charge=ChargeSuccess(
            reference=reference,
            user_id=str(user_id),
            plan=str(plan),
            billing_cycle=billing_cycle,
            transaction_id=_optional_str(data.get("id")),
            currency=_optional_str(data.get("currency")),
        ),
        context=context,
    )


def check_currency(charge: ChargeSuccess, expected_currency: str) -> bool:
    """True when the charge carries no currency or the configured one."""
    if charge.currency is None:
        return True
    return charge.currency.upper() == expected_currency.upper()
