"""Cart models: line items, prices, tax settings and the computed cart."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from shopcart.services.money import Money, parse_amount, to_decimal

DEFAULT_CURRENCY = "USD"

# Keys of a product descriptor that map onto LineItem fields
_LINE_ITEM_FIELDS = ("sku", "title", "prices", "quantity", "type", "vat", "path", "description", "meta")


@dataclass(frozen=True)
class Price:
    """One price entry of a product."""
    amount: str
    currency: Optional[str] = None
    role: Optional[str] = None  # Only users holding a role may pay this price

    @property
    def currency_code(self) -> str:
        """Upper-cased currency, USD when the entry has none."""
        return (self.currency or DEFAULT_CURRENCY).upper()

    @property
    def decimal_amount(self) -> Decimal:
        return to_decimal(self.amount)

    @property
    def has_amount(self) -> bool:
        """False for amounts such as "" or "N/A" that are not numbers."""
        return parse_amount(self.amount) is not None

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {"amount": self.amount}
        if self.currency is not None:
            data["currency"] = self.currency
        if self.role is not None:
            data["role"] = self.role
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Price":
        return cls(
            amount=str(data["amount"]),
            currency=data.get("currency"),
            role=data.get("role"),
        )


@dataclass
class LineItem:
    """A product/quantity pairing in the cart, keyed by SKU."""
    sku: str
    title: str
    prices: List[Price]
    quantity: int
    type: Optional[str] = None  # Product type matched against tax rules
    vat: Optional[str] = None  # Explicit VAT percentage, overrides tax rules
    path: Optional[str] = None  # Product page the item was added from
    description: Optional[str] = None
    meta: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)  # Unrecognized descriptor keys

    def to_dict(self) -> dict:
        """Convert to dictionary (persistence and order payloads)."""
        data = dict(self.extra)
        data.update({
            "sku": self.sku,
            "title": self.title,
            "prices": [price.to_dict() for price in self.prices],
            "quantity": self.quantity,
            "type": self.type,
            "vat": self.vat,
            "path": self.path,
            "description": self.description,
            "meta": self.meta,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """Create from dictionary."""
        vat = data.get("vat")
        if vat in (None, "") or (not isinstance(vat, str) and not vat):
            # A numeric zero means "no explicit VAT", unlike the string "0"
            vat = None
        return cls(
            sku=str(data["sku"]),
            title=data["title"],
            prices=[Price.from_dict(price) for price in data.get("prices", [])],
            quantity=int(data.get("quantity", 0)),
            type=data.get("type"),
            vat=str(vat) if vat is not None else None,
            path=data.get("path"),
            description=data.get("description"),
            meta=data.get("meta"),
            extra={k: v for k, v in data.items() if k not in _LINE_ITEM_FIELDS},
        )


@dataclass(frozen=True)
class TaxRule:
    """Tax percentage for a set of product types sold into a set of countries."""
    product_types: List[str]
    countries: List[str]
    percentage: Decimal

    def applies_to(self, product_type: str, country: str) -> bool:
        return product_type in self.product_types and country in self.countries

    def to_dict(self) -> dict:
        return {
            "product_types": list(self.product_types),
            "countries": list(self.countries),
            "percentage": float(self.percentage),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaxRule":
        return cls(
            product_types=list(data.get("product_types") or []),
            countries=list(data.get("countries") or []),
            percentage=to_decimal(data.get("percentage")),
        )


@dataclass
class Settings:
    """
    Shop settings document.

    Only `taxes` is interpreted; every other key is kept in `raw` so the
    document survives a persist/load cycle unchanged. `ts` is the fetch
    time in epoch milliseconds.
    """
    taxes: List[TaxRule] = field(default_factory=list)
    ts: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = dict(self.raw)
        data["taxes"] = [rule.to_dict() for rule in self.taxes]
        data["ts"] = self.ts
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        ts = data.get("ts")
        return cls(
            taxes=[TaxRule.from_dict(rule) for rule in data.get("taxes") or []],
            ts=int(ts) if ts is not None else None,
            raw={k: v for k, v in data.items() if k not in ("taxes", "ts")},
        )


@dataclass(frozen=True)
class ResolvedItem:
    """Line item with the price chosen for it and the tax computed on it."""
    item: LineItem
    price: Price
    tax: Money

    @property
    def sku(self) -> str:
        return self.item.sku

    @property
    def quantity(self) -> int:
        return self.item.quantity

    def to_dict(self) -> dict:
        data = self.item.to_dict()
        data["price"] = self.price.to_dict()
        data["tax"] = self.tax.to_dict()
        return data


@dataclass(frozen=True)
class Cart:
    """Computed projection of the line items; rebuilt on every read."""
    subtotal: Money
    taxes: Money
    total: Money
    items: Dict[str, ResolvedItem]

    @property
    def currency(self) -> str:
        return self.total.currency

    @property
    def total_items(self) -> int:
        """Total number of units in the cart."""
        return sum(item.quantity for item in self.items.values())

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict:
        """Convert to dictionary for rendering or JSON output."""
        return {
            "subtotal": self.subtotal.to_dict(),
            "taxes": self.taxes.to_dict(),
            "total": self.total.to_dict(),
            "items": {sku: item.to_dict() for sku, item in self.items.items()},
        }
