"""
Order price computation

items_price = sum(unit_price * quantity)
shipping_price = 0 when items_price exceeds the free shipping threshold, else a flat fee
tax_price = items_price * tax rate
total_price = items_price + tax_price + shipping_price

Every amount is rounded half-up to two decimal places.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Tuple

from django.conf import settings

from apps.core.utils import to_money

DEFAULT_TAX_RATE = Decimal('0.10')
DEFAULT_FREE_SHIPPING_THRESHOLD = Decimal('50')
DEFAULT_FLAT_SHIPPING_FEE = Decimal('5.00')


@dataclass(frozen=True)
class OrderPrices:
    items_price: Decimal
    tax_price: Decimal
    shipping_price: Decimal
    total_price: Decimal

    def as_dict(self) -> dict:
        return {
            "items_price": self.items_price,
            "tax_price": self.tax_price,
            "shipping_price": self.shipping_price,
            "total_price": self.total_price,
        }


def _setting(name: str, default: Decimal) -> Decimal:
    config = getattr(settings, 'STOREFRONT', {})
    return Decimal(str(config.get(name, default)))


def shipping_for(items_price: Decimal) -> Decimal:
    threshold = _setting('FREE_SHIPPING_THRESHOLD', DEFAULT_FREE_SHIPPING_THRESHOLD)
    if items_price > threshold:
        return to_money(0)
    return to_money(_setting('FLAT_SHIPPING_FEE', DEFAULT_FLAT_SHIPPING_FEE))


def tax_for(items_price: Decimal) -> Decimal:
    return to_money(items_price * _setting('TAX_RATE', DEFAULT_TAX_RATE))


def calculate_prices(lines: Iterable[Tuple[Decimal, int]]) -> OrderPrices:
    """
    Compute the four money fields from (unit_price, quantity) pairs.
    """
    items_price = to_money(sum(
        (to_money(unit_price) * quantity for unit_price, quantity in lines),
        Decimal('0')
    ))
    tax_price = tax_for(items_price)
    shipping_price = shipping_for(items_price)
    total_price = to_money(items_price + tax_price + shipping_price)

    return OrderPrices(
        items_price=items_price,
        tax_price=tax_price,
        shipping_price=shipping_price,
        total_price=total_price,
    )
