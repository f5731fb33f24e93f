"""Tests for the order lifecycle controller."""

import uuid
from decimal import Decimal

import pytest

from apps.catalog.models import Product
from apps.core.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    OutOfStockException,
    UnauthorizedException,
    ValidationException,
)
from apps.orders.access import AccessPolicy, Requester
from apps.orders.models import Order
from apps.orders.services import OrderLifecycleController
from apps.orders.status import OrderStatus
from factories import make_product, stock_of

PAYMENT = {
    "id": "PAY-123",
    "status": "COMPLETED",
    "update_time": "2024-01-01T10:00:00Z",
    "payer": {"email_address": "alice@example.com"},
}


@pytest.mark.django_db
class TestCreateOrder:
    def test_creates_processing_order_with_snapshots(self, place_order, customer_requester, product):
        order = place_order(customer_requester, product, quantity=2, size="M")

        assert order.status == OrderStatus.PROCESSING
        assert order.payment_status == "completed"
        assert order.is_paid is False
        assert order.user_id == customer_requester.user_id

        item = order.items.get()
        assert item.name == "Basic Tee"
        assert item.unit_price == Decimal("20.00")
        assert item.quantity == 2
        assert item.size == "M"
        assert item.image == "https://cdn.example.com/tee.jpg"

    def test_prices_are_computed(self, place_order, customer_requester, product):
        order = place_order(customer_requester, product, quantity=2, size="M")
        assert order.items_price == Decimal("40.00")
        assert order.tax_price == Decimal("4.00")
        assert order.shipping_price == Decimal("5.00")
        assert order.total_price == Decimal("49.00")
        assert order.amount_paid == order.total_price

    def test_hundred_dollar_order(self, place_order, customer_requester, expensive_product):
        order = place_order(customer_requester, expensive_product, quantity=1, size="L")
        order.refresh_from_db()
        assert order.items_price == Decimal("100.00")
        assert order.shipping_price == Decimal("0.00")
        assert order.tax_price == Decimal("10.00")
        assert order.total_price == Decimal("110.00")

    def test_client_prices_are_not_trusted(self, place_order, customer_requester, expensive_product):
        order = place_order(
            customer_requester,
            expensive_product,
            quantity=1,
            size="L",
            prices={"items_price": "1.00", "total_price": "1.00"},
        )
        assert order.total_price == Decimal("110.00")

    def test_discount_price_is_snapshotted(self, place_order, customer_requester):
        sale = make_product(name="Sale Tee", price="30.00", discount_price="24.50", sizes={"S": 4})
        order = place_order(customer_requester, sale, quantity=2, size="S")
        assert order.items.get().unit_price == Decimal("24.50")
        assert order.items_price == Decimal("49.00")

    def test_reserves_stock(self, place_order, customer_requester, product):
        place_order(customer_requester, product, quantity=2, size="M")
        assert stock_of(product, "M") == 0
        product.refresh_from_db()
        assert product.sold == 2

    def test_second_order_runs_out(self, place_order, customer_requester, product):
        place_order(customer_requester, product, quantity=2, size="M")
        with pytest.raises(OutOfStockException):
            place_order(customer_requester, product, quantity=1, size="M")
        assert Order.objects.count() == 1

    def test_out_of_stock_leaves_no_trace(self, place_order, customer_requester, product):
        with pytest.raises(OutOfStockException):
            place_order(customer_requester, product, quantity=3, size="M")
        assert stock_of(product, "M") == 2
        assert Order.objects.count() == 0

    def test_missing_size_is_out_of_stock(self, place_order, customer_requester, product):
        with pytest.raises(OutOfStockException):
            place_order(customer_requester, product, quantity=1, size="XXL")

    def test_empty_items(self, controller, customer_requester, shipping_info):
        with pytest.raises(ValidationException) as exc_info:
            controller.create_order(customer_requester, [], shipping_info)
        assert exc_info.value.message == "No order items"

    def test_zero_quantity(self, controller, customer_requester, shipping_info, product):
        with pytest.raises(ValidationException):
            controller.create_order(
                customer_requester,
                [{"product": str(product.id), "quantity": 0, "size": "M"}],
                shipping_info,
            )

    def test_missing_shipping_info(self, controller, customer_requester, shipping_info, product):
        del shipping_info["phone"]
        with pytest.raises(ValidationException) as exc_info:
            controller.create_order(
                customer_requester,
                [{"product": str(product.id), "quantity": 1, "size": "M"}],
                shipping_info,
            )
        assert "phone" in exc_info.value.message

    def test_unknown_product(self, controller, customer_requester, shipping_info):
        with pytest.raises(NotFoundException):
            controller.create_order(
                customer_requester,
                [{"product": str(uuid.uuid4()), "quantity": 1, "size": "M"}],
                shipping_info,
            )

    def test_malformed_product_id(self, controller, customer_requester, shipping_info):
        with pytest.raises(NotFoundException):
            controller.create_order(
                customer_requester,
                [{"product": "not-an-id", "quantity": 1, "size": "M"}],
                shipping_info,
            )

    def test_multi_item_order_keeps_item_order(self, controller, customer_requester, shipping_info, product, expensive_product):
        order = controller.create_order(
            customer_requester,
            [
                {"product": str(expensive_product.id), "quantity": 1, "size": "L"},
                {"product": str(product.id), "quantity": 1, "size": "S", "color": {"name": "Black", "code": "#000000"}},
            ],
            shipping_info,
        )
        items = list(order.items.all())
        assert [item.name for item in items] == ["Wool Coat", "Basic Tee"]
        assert items[1].color_name == "Black"
        assert order.items_price == Decimal("120.00")

    def test_snapshot_survives_product_edits(self, place_order, customer_requester, product):
        order = place_order(customer_requester, product, quantity=1, size="M")
        Product.objects.filter(pk=product.pk).update(name="Renamed Tee", price=Decimal("99.00"))

        item = Order.objects.get(pk=order.pk).items.get()
        assert item.name == "Basic Tee"
        assert item.unit_price == Decimal("20.00")

    def test_snapshot_survives_product_deletion(self, place_order, customer_requester, product):
        order = place_order(customer_requester, product, quantity=1, size="M")
        product.delete()

        item = Order.objects.get(pk=order.pk).items.get()
        assert item.product_id is None
        assert item.name == "Basic Tee"


@pytest.mark.django_db
class TestGetOrder:
    def test_owner_can_view(self, controller, place_order, customer_requester, product):
        order = place_order(customer_requester, product)
        assert controller.get_order(order.id, customer_requester) == order

    def test_admin_can_view(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        assert controller.get_order(str(order.id), admin_requester) == order

    def test_stranger_cannot_view(self, controller, place_order, customer_requester, other_requester, product):
        order = place_order(customer_requester, product)
        with pytest.raises(UnauthorizedException):
            controller.get_order(order.id, other_requester)

    def test_missing_order(self, controller, customer_requester):
        with pytest.raises(NotFoundException):
            controller.get_order(uuid.uuid4(), customer_requester)

    def test_malformed_id(self, controller, customer_requester):
        with pytest.raises(NotFoundException):
            controller.get_order("12345", customer_requester)


@pytest.mark.django_db
class TestListOrders:
    def test_list_mine_only_returns_own(self, controller, place_order, customer_requester, other_requester, product):
        mine = place_order(customer_requester, product)
        place_order(other_requester, product, size="S")
        assert controller.list_mine(customer_requester) == [mine]

    def test_list_all_for_admin(self, controller, place_order, customer_requester, other_requester, admin_requester, product):
        place_order(customer_requester, product)
        place_order(other_requester, product, size="S")
        assert len(controller.list_all(admin_requester)) == 2

    def test_list_all_requires_admin(self, controller, customer_requester):
        with pytest.raises(UnauthorizedException):
            controller.list_all(customer_requester)


@pytest.mark.django_db
class TestMarkPaid:
    def test_records_payment(self, controller, place_order, customer_requester, product):
        order = place_order(customer_requester, product)
        paid = controller.mark_paid(order.id, customer_requester, PAYMENT)

        assert paid.is_paid is True
        assert paid.paid_at is not None
        assert paid.payment_id == "PAY-123"
        assert paid.payment_status == "COMPLETED"
        assert paid.payment_update_time == "2024-01-01T10:00:00Z"
        assert paid.payer_email == "alice@example.com"

    def test_payer_is_optional(self, controller, place_order, customer_requester, product):
        order = place_order(customer_requester, product)
        paid = controller.mark_paid(order.id, customer_requester, {"id": "PAY-9"})
        assert paid.payer_email == ""

    def test_stranger_cannot_pay(self, controller, place_order, customer_requester, other_requester, product):
        order = place_order(customer_requester, product)
        with pytest.raises(UnauthorizedException):
            controller.mark_paid(order.id, other_requester, PAYMENT)

    def test_admin_can_pay(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        assert controller.mark_paid(order.id, admin_requester, PAYMENT).is_paid

    def test_missing_order(self, controller, customer_requester):
        with pytest.raises(NotFoundException):
            controller.mark_paid(uuid.uuid4(), customer_requester, PAYMENT)


@pytest.mark.django_db
class TestMarkDelivered:
    def test_admin_marks_delivered(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        delivered = controller.mark_delivered(order.id, admin_requester)

        assert delivered.status == OrderStatus.DELIVERED
        assert delivered.is_delivered is True
        assert delivered.delivered_at is not None

    def test_owner_cannot_mark_delivered(self, controller, place_order, customer_requester, product):
        order = place_order(customer_requester, product)
        with pytest.raises(UnauthorizedException):
            controller.mark_delivered(order.id, customer_requester)

    def test_cancelled_order_cannot_be_delivered(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        controller.cancel_order(order.id, customer_requester)
        with pytest.raises(InvalidTransitionException):
            controller.mark_delivered(order.id, admin_requester)


@pytest.mark.django_db
class TestCancelOrder:
    def test_cancel_paid_order_restores_stock(self, controller, place_order, customer_requester, product):
        order = place_order(customer_requester, product, quantity=2, size="M")
        controller.mark_paid(order.id, customer_requester, PAYMENT)
        assert stock_of(product, "M") == 0

        cancelled = controller.cancel_order(order.id, customer_requester)

        assert cancelled.status == OrderStatus.CANCELLED
        assert stock_of(product, "M") == 2
        product.refresh_from_db()
        assert product.sold == 0

    def test_cancel_unpaid_order_keeps_stock(self, controller, place_order, customer_requester, product):
        order = place_order(customer_requester, product, quantity=2, size="M")
        controller.cancel_order(order.id, customer_requester)
        assert stock_of(product, "M") == 0

    def test_cannot_cancel_twice(self, controller, place_order, customer_requester, product):
        order = place_order(customer_requester, product, quantity=1, size="M")
        controller.mark_paid(order.id, customer_requester, PAYMENT)
        controller.cancel_order(order.id, customer_requester)

        with pytest.raises(InvalidTransitionException):
            controller.cancel_order(order.id, customer_requester)
        assert stock_of(product, "M") == 2

    def test_cannot_cancel_delivered(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        controller.mark_delivered(order.id, admin_requester)
        with pytest.raises(InvalidTransitionException) as exc_info:
            controller.cancel_order(order.id, customer_requester)
        assert exc_info.value.message == "Order cannot be cancelled at this stage"

    def test_cannot_cancel_shipped(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        controller.set_status(order.id, admin_requester, OrderStatus.SHIPPED)
        with pytest.raises(InvalidTransitionException):
            controller.cancel_order(order.id, customer_requester)

    def test_stranger_cannot_cancel(self, controller, place_order, customer_requester, other_requester, product):
        order = place_order(customer_requester, product)
        with pytest.raises(UnauthorizedException):
            controller.cancel_order(order.id, other_requester)
        assert Order.objects.get(pk=order.pk).status == OrderStatus.PROCESSING

    def test_admin_can_cancel(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        assert controller.cancel_order(order.id, admin_requester).status == OrderStatus.CANCELLED


@pytest.mark.django_db
class TestSetStatus:
    def test_walks_forward(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        controller.set_status(order.id, admin_requester, "shipped")
        order = controller.set_status(order.id, admin_requester, "out_for_delivery")
        assert order.status == OrderStatus.OUT_FOR_DELIVERY

    def test_rejects_backwards(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        controller.set_status(order.id, admin_requester, "shipped")
        with pytest.raises(InvalidTransitionException):
            controller.set_status(order.id, admin_requester, "processing")

    def test_refund_after_delivery(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        controller.set_status(order.id, admin_requester, "delivered")
        order = controller.set_status(order.id, admin_requester, "refunded")
        assert order.status == OrderStatus.REFUNDED

    def test_delivered_goes_through_mark_delivered(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        order = controller.set_status(order.id, admin_requester, "delivered")
        assert order.is_delivered is True

    def test_cancelled_goes_through_cancel(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product, quantity=2, size="M")
        controller.mark_paid(order.id, customer_requester, PAYMENT)
        controller.set_status(order.id, admin_requester, "cancelled")
        assert stock_of(product, "M") == 2

    def test_unknown_status(self, controller, place_order, customer_requester, admin_requester, product):
        order = place_order(customer_requester, product)
        with pytest.raises(ValidationException):
            controller.set_status(order.id, admin_requester, "lost")

    def test_requires_admin(self, controller, place_order, customer_requester, product):
        order = place_order(customer_requester, product)
        with pytest.raises(UnauthorizedException):
            controller.set_status(order.id, customer_requester, "shipped")


@pytest.mark.django_db
class TestInjectedCollaborators:
    def test_custom_access_policy(self, place_order, customer_requester, other_requester, product):
        class OpenPolicy(AccessPolicy):
            def ensure_owner_or_admin(self, order, requester, action):
                return None

        order = place_order(customer_requester, product)
        controller = OrderLifecycleController(access=OpenPolicy())
        assert controller.get_order(order.id, other_requester) == order

    def test_requester_from_user(self, admin_user, customer):
        assert Requester.from_user(admin_user).is_admin is True
        assert Requester.from_user(customer) == Requester(user_id=customer.pk, is_admin=False)
