# app/core/money.py

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize to cents, rounding half up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# Largest magnitude a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")
