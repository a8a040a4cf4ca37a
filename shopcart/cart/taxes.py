"""
Tax calculator.

Tax source, in priority order:
1. An explicit VAT percentage on the item.
2. The first settings tax rule matching the item's product type and the
   billing country.
3. Nothing: zero tax.
"""
from decimal import Decimal
from typing import Optional, Sequence

from shopcart.services.money import Money, money_from_cents, to_cents, to_decimal, zero_money
from .models import LineItem, Price, TaxRule


def apply_tax(price: Price, quantity: int, percentage) -> Money:
    """
    Tax on `quantity` units at `percentage` percent.

    The pre-tax total is truncated to whole cents; the resulting tax
    cents may be fractional and are kept raw next to the rounded amount.
    """
    cents = to_cents(price.amount, quantity)
    tax_cents = Decimal(cents) * to_decimal(percentage) / 100
    return money_from_cents(tax_cents, price.currency_code)


def _vat_percentage(vat: str) -> int:
    """Explicit VAT percentages are whole numbers; fractions are dropped."""
    return int(to_decimal(vat))


def find_tax_rule(
    tax_rules: Sequence[TaxRule],
    product_type: str,
    country: str,
) -> Optional[TaxRule]:
    """First rule covering both the product type and the country."""
    return next((rule for rule in tax_rules if rule.applies_to(product_type, country)), None)


def compute_tax(
    item: LineItem,
    price: Price,
    tax_rules: Optional[Sequence[TaxRule]],
    country: Optional[str],
) -> Money:
    """
    Compute the tax for a line item at its resolved price.

    Args:
        item: Line item (quantity, product type, explicit VAT)
        price: Price chosen for the item
        tax_rules: Tax table from settings, if loaded
        country: Billing country code, if known

    Returns:
        Tax as Money in the price's currency
    """
    if item.vat:
        return apply_tax(price, item.quantity, _vat_percentage(item.vat))

    if tax_rules and country and item.type:
        rule = find_tax_rule(tax_rules, item.type, country)
        if rule is not None:
            return apply_tax(price, item.quantity, rule.percentage)

    return zero_money(price.currency_code)
