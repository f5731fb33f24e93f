"""
Stock Reconciliation

Decrements per-size quantities when an order is placed and restores them when
a paid order is cancelled. Each decrement is a single conditional UPDATE
(quantity >= requested) so two concurrent orders can never drive a size below
zero; all lines of one call share a transaction so a failure on any line
leaves the catalog untouched.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from django.db import transaction
from django.db.models import F

from apps.catalog.models import Product, ProductSize
from apps.core.exceptions import NotFoundException, OutOfStockException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockLine:
    """One product/size/quantity to reserve or restore."""
    product_id: Any
    size: str
    quantity: int
    name: str = ""

    @classmethod
    def from_item(cls, item) -> "StockLine":
        return cls(
            product_id=item.product_id,
            size=item.size,
            quantity=item.quantity,
            name=item.name,
        )


class StockReconciler:
    """
    Reserve and restore per-size stock on the catalog.
    """

    def check(self, lines: Iterable[StockLine]) -> None:
        """
        Read-only availability check. Repeated product/size pairs are summed.
        """
        requested: Dict[Tuple[str, str], int] = defaultdict(int)
        names: Dict[Tuple[str, str], str] = {}
        for line in lines:
            key = (str(line.product_id), line.size)
            requested[key] += line.quantity
            names[key] = line.name

        product_ids = {product_id for product_id, _ in requested}
        products = {
            str(product.pk): product
            for product in Product.objects.filter(pk__in=product_ids).prefetch_related('sizes')
        }

        for (product_id, size), quantity in requested.items():
            product = products.get(product_id)
            if product is None:
                raise NotFoundException("Product", product_id)

            size_entry = next((s for s in product.sizes.all() if s.size == size), None)
            available = size_entry.quantity if size_entry else 0
            if size_entry is None or available < quantity:
                raise OutOfStockException(product.name, size, requested=quantity, available=available)

    def reserve(self, lines: Iterable[StockLine]) -> List[StockLine]:
        """
        Decrement stock for every line, all or nothing.
        """
        reserved = []
        with transaction.atomic():
            for line in lines:
                updated = ProductSize.objects.filter(
                    product_id=line.product_id,
                    size=line.size,
                    quantity__gte=line.quantity,
                ).update(quantity=F('quantity') - line.quantity)

                if not updated:
                    raise OutOfStockException(line.name or str(line.product_id), line.size, requested=line.quantity)

                Product.objects.filter(pk=line.product_id).update(sold=F('sold') + line.quantity)
                reserved.append(line)

        logger.debug(f"Reserved stock for {len(reserved)} line(s)")
        return reserved

    def restore(self, lines: Iterable[StockLine]) -> List[StockLine]:
        """
        Give reserved quantities back. Lines whose product or size no longer
        exists are skipped.
        """
        restored = []
        with transaction.atomic():
            for line in lines:
                if line.product_id is None:
                    logger.warning(f"Skipping stock restore for '{line.name}' ({line.size}): product was deleted")
                    continue

                updated = ProductSize.objects.filter(
                    product_id=line.product_id,
                    size=line.size,
                ).update(quantity=F('quantity') + line.quantity)

                if not updated:
                    logger.warning(
                        f"Skipping stock restore for '{line.name}' ({line.size}): size no longer listed"
                    )
                    continue

                Product.objects.filter(
                    pk=line.product_id,
                    sold__gte=line.quantity,
                ).update(sold=F('sold') - line.quantity)
                restored.append(line)

        logger.debug(f"Restored stock for {len(restored)} line(s)")
        return restored
