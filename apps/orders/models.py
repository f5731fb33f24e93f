"""
Orders Models - Order Ledger
Tables: Orders, OrderItems

Order items are snapshots taken at purchase time; they keep a nullable link to
the catalog product but never read live product data back.
"""
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import BaseModel
from apps.catalog.models import Product, ProductSize
from .pricing import calculate_prices, OrderPrices
from .status import OrderStatus, can_cancel, status_info


class Order(BaseModel):
    """
    Customer order. Never deleted; mutated by payment, delivery and cancellation.
    """
    PAYMENT_METHOD_CHOICES = [
        ('credit_card', 'Credit card'),
        ('paypal', 'PayPal'),
        ('cash_on_delivery', 'Cash on delivery'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders')

    # Shipping info
    shipping_address = models.CharField(max_length=255)
    shipping_city = models.CharField(max_length=100)
    shipping_state = models.CharField(max_length=100)
    shipping_country = models.CharField(max_length=100)
    shipping_zip_code = models.CharField(max_length=20)
    shipping_phone = models.CharField(max_length=30, db_index=True)

    # Payment info
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='credit_card')
    payment_id = models.CharField(max_length=100, blank=True, default='')
    payment_status = models.CharField(max_length=50, blank=True, default='')
    payment_update_time = models.CharField(max_length=100, blank=True, default='')
    payer_email = models.EmailField(blank=True, default='')
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(blank=True, null=True)

    # Derived money fields
    items_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    shipping_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PROCESSING,
        db_index=True
    )
    is_delivered = models.BooleanField(default=False)
    delivered_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'orders_orders'
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        ordering = ['-created_at']

    def __str__(self):
        return f"Order {self.id} - {self.status} - ${self.total_price}"

    @property
    def status_info(self) -> dict:
        return status_info(self.status)

    @property
    def can_be_cancelled(self) -> bool:
        return can_cancel(self.status)

    def recalculate_prices(self) -> OrderPrices:
        """
        Recompute the money fields from the item snapshots.
        """
        prices = calculate_prices(
            (item.unit_price, item.quantity) for item in self.items.all()
        )
        self.items_price = prices.items_price
        self.tax_price = prices.tax_price
        self.shipping_price = prices.shipping_price
        self.total_price = prices.total_price
        return prices


class OrderItem(BaseModel):
    """
    Snapshot of a purchased product line.
    """
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_items'
    )
    position = models.PositiveIntegerField(default=0)
    name = models.CharField(max_length=100)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    size = models.CharField(max_length=10, choices=ProductSize.SIZE_CHOICES)
    color_name = models.CharField(max_length=50, blank=True, default='')
    color_code = models.CharField(max_length=20, blank=True, default='')
    image = models.URLField(max_length=500, blank=True, default='')

    class Meta:
        db_table = 'orders_order_items'
        verbose_name = 'Order item'
        verbose_name_plural = 'Order items'
        ordering = ['position']

    def __str__(self):
        return f"{self.quantity} x {self.name} ({self.size})"

    @property
    def line_total(self):
        return self.unit_price * self.quantity
