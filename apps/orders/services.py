"""
Order Lifecycle Controller

Create, fetch, pay, deliver, list and cancel orders. Ownership and role checks
go through an injected AccessPolicy and stock moves through an injected
StockReconciler, so the controller has no knowledge of HTTP.
"""
import logging
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from apps.catalog.models import Product
from apps.core.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from apps.core.utils import parse_uuid, to_money
from .access import AccessPolicy, Requester
from .models import Order, OrderItem
from .status import OrderStatus, can_transition
from .stock import StockLine, StockReconciler

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ('address', 'city', 'state', 'country', 'zip_code', 'phone')
PRICE_FIELDS = ('items_price', 'tax_price', 'shipping_price', 'total_price')


class OrderLifecycleController:
    """
    Entry point for every order operation.
    """

    def __init__(self, stock: Optional[StockReconciler] = None, access: Optional[AccessPolicy] = None):
        self.stock = stock or StockReconciler()
        self.access = access or AccessPolicy()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_order(
        self,
        requester: Requester,
        items: List[Dict[str, Any]],
        shipping_info: Dict[str, Any],
        payment_info: Optional[Dict[str, Any]] = None,
        prices: Optional[Dict[str, Any]] = None,
    ) -> Order:
        """
        Validate the cart, persist the order with item snapshots and
        server-computed prices, then reserve stock in the same transaction.
        """
        if not items:
            raise ValidationException("No order items", field="order_items")

        missing = [name for name in SHIPPING_FIELDS if not (shipping_info or {}).get(name)]
        if missing:
            raise ValidationException(
                f"Missing shipping info: {', '.join(missing)}",
                field="shipping_info"
            )

        snapshots = self._build_snapshots(items)
        lines = [StockLine.from_item(snapshot) for snapshot in snapshots]

        # Friendly errors before anything is written
        self.stock.check(lines)

        payment_info = payment_info or {}
        with transaction.atomic():
            order = Order.objects.create(
                user_id=requester.user_id,
                shipping_address=shipping_info['address'],
                shipping_city=shipping_info['city'],
                shipping_state=shipping_info['state'],
                shipping_country=shipping_info['country'],
                shipping_zip_code=shipping_info['zip_code'],
                shipping_phone=shipping_info['phone'],
                payment_method=payment_info.get('payment_method') or 'credit_card',
                payment_id=payment_info.get('id') or '',
                payment_status='completed',
                status=OrderStatus.PROCESSING,
            )

            for snapshot in snapshots:
                snapshot.order = order
            OrderItem.objects.bulk_create(snapshots)

            computed = order.recalculate_prices()
            order.amount_paid = computed.total_price
            order.save()

            self.stock.reserve(lines)

        self._log_price_mismatch(order, prices)
        logger.info(
            f"Order {order.id} created for user {requester.user_id}: "
            f"{len(snapshots)} item(s), total {order.total_price}"
        )
        return order

    def _build_snapshots(self, items: List[Dict[str, Any]]) -> List[OrderItem]:
        products = self._load_products(items)
        snapshots = []

        for position, item in enumerate(items):
            quantity = item.get('quantity')
            if not isinstance(quantity, int) or quantity < 1:
                raise ValidationException("Item quantity must be at least 1", field="quantity")
            if not item.get('size'):
                raise ValidationException("Item size is required", field="size")

            product = products[str(parse_uuid(item.get('product')))]
            color = item.get('color') or {}
            snapshots.append(OrderItem(
                position=position,
                product=product,
                name=product.name,
                unit_price=to_money(product.final_price),
                quantity=quantity,
                size=item['size'],
                color_name=color.get('name', ''),
                color_code=color.get('code', ''),
                image=product.main_image or '',
            ))

        return snapshots

    def _load_products(self, items: List[Dict[str, Any]]) -> Dict[str, Product]:
        ids = []
        for item in items:
            product_id = parse_uuid(item.get('product'))
            if product_id is None:
                raise NotFoundException("Product", item.get('product'))
            ids.append(product_id)

        products = {
            str(product.pk): product
            for product in Product.objects.filter(pk__in=ids).prefetch_related('images')
        }
        for product_id in ids:
            if str(product_id) not in products:
                raise NotFoundException("Product", product_id)
        return products

    def _log_price_mismatch(self, order: Order, prices: Optional[Dict[str, Any]]) -> None:
        if not prices:
            return
        for name in PRICE_FIELDS:
            claimed = prices.get(name)
            if claimed is None:
                continue
            if to_money(claimed) != getattr(order, name):
                logger.warning(
                    f"Order {order.id}: client {name} {claimed} differs from computed "
                    f"{getattr(order, name)}; computed value stored"
                )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_order(self, order_id: Any, requester: Requester) -> Order:
        order = self._get_order(order_id)
        self.access.ensure_owner_or_admin(order, requester, "view")
        return order

    def list_mine(self, requester: Requester) -> List[Order]:
        return list(
            Order.objects.filter(user_id=requester.user_id).prefetch_related('items')
        )

    def list_all(self, requester: Requester) -> List[Order]:
        self.access.ensure_admin(requester, "list all orders")
        return list(Order.objects.select_related('user').prefetch_related('items'))

    # ------------------------------------------------------------------
    # Payment and delivery
    # ------------------------------------------------------------------

    def mark_paid(self, order_id: Any, requester: Requester, payload: Dict[str, Any]) -> Order:
        """
        Record a payment. Repeated calls overwrite the payment metadata.
        """
        payload = payload or {}
        payer = payload.get('payer') or {}

        with transaction.atomic():
            order = self._get_order(order_id, lock=True)
            self.access.ensure_owner_or_admin(order, requester, "update")

            order.is_paid = True
            order.paid_at = timezone.now()
            order.payment_id = payload.get('id') or ''
            order.payment_status = payload.get('status') or ''
            order.payment_update_time = payload.get('update_time') or ''
            order.payer_email = payer.get('email_address') or ''
            order.save()

        logger.info(f"Order {order.id} marked paid (payment {order.payment_id or 'n/a'})")
        return order

    def mark_delivered(self, order_id: Any, requester: Requester) -> Order:
        self.access.ensure_admin(requester, "mark orders as delivered")

        with transaction.atomic():
            order = self._get_order(order_id, lock=True)
            self._ensure_transition(order, OrderStatus.DELIVERED)

            order.status = OrderStatus.DELIVERED
            order.is_delivered = True
            order.delivered_at = timezone.now()
            order.save()

        logger.info(f"Order {order.id} marked delivered")
        return order

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def cancel_order(self, order_id: Any, requester: Requester) -> Order:
        """
        Cancel an order that has not shipped yet. Paid orders get their
        stock back.
        """
        with transaction.atomic():
            order = self._get_order(order_id, lock=True)
            self.access.ensure_owner_or_admin(order, requester, "cancel")

            if not order.can_be_cancelled:
                raise InvalidTransitionException(
                    order.status,
                    OrderStatus.CANCELLED,
                    message="Order cannot be cancelled at this stage"
                )

            if order.is_paid:
                self.stock.restore([StockLine.from_item(item) for item in order.items.all()])

            order.status = OrderStatus.CANCELLED
            order.save()

        logger.info(f"Order {order.id} cancelled by user {requester.user_id} (stock restored: {order.is_paid})")
        return order

    def set_status(self, order_id: Any, requester: Requester, status: str) -> Order:
        """
        Admin tooling: move an order along the transition table. Cancellation
        and delivery keep their side effects by delegating.
        """
        self.access.ensure_admin(requester, "change order status")

        if status not in OrderStatus.values:
            raise ValidationException(f"Unknown order status: {status}", field="status")
        if status == OrderStatus.CANCELLED:
            return self.cancel_order(order_id, requester)
        if status == OrderStatus.DELIVERED:
            return self.mark_delivered(order_id, requester)

        with transaction.atomic():
            order = self._get_order(order_id, lock=True)
            self._ensure_transition(order, status)
            previous = order.status
            order.status = status
            order.save()

        logger.info(f"Order {order.id} moved from {previous} to {status}")
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_order(self, order_id: Any, lock: bool = False) -> Order:
        pk = parse_uuid(order_id)
        if pk is None:
            raise NotFoundException("Order", order_id)

        queryset = Order.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=pk)
        except Order.DoesNotExist:
            raise NotFoundException("Order", order_id)

    def _ensure_transition(self, order: Order, target: str) -> None:
        if not can_transition(order.status, target):
            raise InvalidTransitionException(order.status, target)
