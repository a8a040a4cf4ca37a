"""
Money Utilities - Safe Decimal operations for monetary values.

Avoids float precision issues by using Decimal throughout. Amounts travel
as 2-decimal display strings next to a cents figure, the shape the
commerce API and the cart projections use.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

# Precision for whole cents
CENT_PRECISION = Decimal("1")

Number = Union[str, int, float, Decimal]


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        # Convert via string to avoid float precision issues
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_amount(value: Union[Number, None]) -> Optional[Decimal]:
    """
    Strict counterpart of to_decimal for price amounts.

    Returns:
        Decimal value, or None when the value is not a finite number
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return None

    return amount if amount.is_finite() else None


def to_cents(amount: Number, quantity: int = 1) -> int:
    """
    Whole cents for `quantity` units of `amount`, truncated toward zero.

    Args:
        amount: Unit amount in major units (e.g. "10.00")
        quantity: Number of units

    Returns:
        Integer cents (e.g. 2000 for "10.00" x 2)
    """
    cents = to_decimal(amount) * quantity * 100
    return int(cents.quantize(CENT_PRECISION, rounding=ROUND_DOWN))


def cents_to_amount(cents: Number) -> str:
    """
    Format a cents figure as a 2-decimal amount string.

    Fractional cents are rounded half-up to the nearest cent first.
    """
    whole_cents = to_decimal(cents).quantize(CENT_PRECISION, rounding=ROUND_HALF_UP)
    return str((whole_cents / 100).quantize(MONEY_PRECISION))


@dataclass(frozen=True)
class Money:
    """A currency amount as display string plus raw cents."""
    amount: str
    cents: Decimal
    currency: str

    def to_dict(self) -> dict:
        """Convert to dictionary (JSON-friendly numbers)."""
        cents = self.cents
        if cents == cents.to_integral_value():
            cents_value: Union[int, float] = int(cents)
        else:
            cents_value = float(cents)
        return {"amount": self.amount, "cents": cents_value, "currency": self.currency}


def money_from_cents(cents: Number, currency: str) -> Money:
    """Build Money from a (possibly fractional) cents figure."""
    raw = to_decimal(cents)
    return Money(amount=cents_to_amount(raw), cents=raw, currency=currency)


def zero_money(currency: str) -> Money:
    """Zero amount in the given currency."""
    return Money(amount="0.00", cents=Decimal("0"), currency=currency)
