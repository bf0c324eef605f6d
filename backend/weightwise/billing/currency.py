"""Major/minor currency unit conversion driven by the configured factor table."""

from decimal import ROUND_HALF_UP, Decimal

from weightwise.billing.errors import BillingConfigurationError
from weightwise.config import settings


def minor_unit_factor(currency: str, table: dict[str, int] | None = None) -> int:
    """Return how many minor units make up one major unit of ``currency``.

    Raises:
        BillingConfigurationError: If the currency has no configured factor.
    """
    factors = settings.currency_minor_units if table is None else table
    try:
        return factors[currency.upper()]
    except KeyError:
        raise BillingConfigurationError(
            f"No minor-unit factor configured for currency {currency!r}"
        ) from None


def to_minor_units(amount: float, currency: str, table: dict[str, int] | None = None) -> int:
    """Convert a major-unit amount to integer minor units, rounding half up.

    ``Decimal(str(amount))`` keeps 2.675 from turning into 2.67499... before
    scaling.
    """
    factor = minor_unit_factor(currency, table)
    scaled = Decimal(str(amount)) * factor
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
