"""Cart aggregator: fold resolved prices and taxes into cart totals."""
from decimal import Decimal
from typing import Mapping, Optional

from shopcart.auth import SessionUser
from shopcart.errors import UnpriceableItemError
from shopcart.services.money import money_from_cents, to_decimal, zero_money
from .models import Cart, LineItem, ResolvedItem, Settings
from .pricing import resolve_price
from .taxes import compute_tax


def build_cart(
    line_items: Mapping[str, LineItem],
    settings: Optional[Settings],
    currency: str,
    country: Optional[str] = None,
    user: Optional[SessionUser] = None,
    vat_number_valid: bool = False,
) -> Cart:
    """
    Project line items into a priced, taxed cart.

    Pure function of its arguments. Per-item taxes are summed from their
    rounded 2-decimal amounts, not from the raw tax cents. A valid VAT
    number exempts the whole cart from tax.

    Raises:
        UnpriceableItemError: An item has no price for this currency/user
    """
    tax_rules = settings.taxes if settings else None
    items = {}
    subtotal_cents = Decimal("0")
    tax_cents = Decimal("0")

    for sku, line_item in line_items.items():
        price = resolve_price(line_item.prices, currency, user)
        if price is None:
            raise UnpriceableItemError(sku, currency)

        tax = compute_tax(line_item, price, tax_rules, country)
        items[sku] = ResolvedItem(item=line_item, price=price, tax=tax)

        subtotal_cents += price.decimal_amount * line_item.quantity * 100
        tax_cents += to_decimal(tax.amount) * 100

    subtotal = money_from_cents(subtotal_cents, currency)
    if vat_number_valid:
        taxes = zero_money(currency)
    else:
        taxes = money_from_cents(tax_cents, currency)
    total = money_from_cents(subtotal.cents + taxes.cents, currency)

    return Cart(subtotal=subtotal, taxes=taxes, total=total, items=items)
