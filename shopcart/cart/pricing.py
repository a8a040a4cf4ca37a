"""Pricing resolver: choose the applicable price entry for a line item."""
from typing import Optional, Sequence

from shopcart.auth import SessionUser, has_any_role
from .models import Price


def resolve_price(
    prices: Sequence[Price],
    currency: str,
    user: Optional[SessionUser] = None,
) -> Optional[Price]:
    """
    Pick the cheapest price the user may pay in the given currency.

    Entries without a currency count as USD; currency matching is
    case-insensitive. Role-restricted entries are only eligible when the
    user holds some role. Entries whose amount is not a number never
    match. Ties keep their listing order.

    Returns:
        The chosen Price, or None when no entry applies
    """
    target = currency.upper()
    may_use_roles = has_any_role(user)
    candidates = [
        price for price in prices
        if price.currency_code == target
        and price.has_amount
        and (not price.role or may_use_roles)
    ]
    if not candidates:
        return None
    # sorted() is stable, so equal amounts keep their listing order
    return sorted(candidates, key=lambda price: price.decimal_amount)[0]
