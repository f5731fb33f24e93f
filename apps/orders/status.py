"""
Order status state machine

Orders move forward along processing -> shipped -> out_for_delivery -> delivered.
cancelled, returned and refunded are terminal side exits.
"""
from typing import Dict, FrozenSet

from django.db import models


class OrderStatus(models.TextChoices):
    PROCESSING = 'processing', 'Processing'
    SHIPPED = 'shipped', 'Shipped'
    OUT_FOR_DELIVERY = 'out_for_delivery', 'Out for delivery'
    DELIVERED = 'delivered', 'Delivered'
    CANCELLED = 'cancelled', 'Cancelled'
    RETURNED = 'returned', 'Returned'
    REFUNDED = 'refunded', 'Refunded'


ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    OrderStatus.PROCESSING: frozenset({
        OrderStatus.SHIPPED,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.SHIPPED: frozenset({
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
    }),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({
        OrderStatus.DELIVERED,
    }),
    OrderStatus.DELIVERED: frozenset({
        OrderStatus.RETURNED,
        OrderStatus.REFUNDED,
    }),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

NON_CANCELLABLE_STATUSES = frozenset({
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.RETURNED,
    OrderStatus.REFUNDED,
})

STATUS_INFO = {
    OrderStatus.PROCESSING: {
        "message": "Your order is being processed",
        "description": "We have received your order and are preparing it for shipment.",
        "progress": 25,
    },
    OrderStatus.SHIPPED: {
        "message": "Your order has been shipped",
        "description": "Your package is on its way to you.",
        "progress": 50,
    },
    OrderStatus.OUT_FOR_DELIVERY: {
        "message": "Your order is out for delivery",
        "description": "The courier is on the way to deliver your package.",
        "progress": 75,
    },
    OrderStatus.DELIVERED: {
        "message": "Your order has been delivered",
        "description": "Your package has been successfully delivered.",
        "progress": 100,
    },
    OrderStatus.CANCELLED: {
        "message": "Your order has been cancelled",
        "description": "This order has been cancelled as per your request.",
        "progress": 0,
    },
    OrderStatus.RETURNED: {
        "message": "Your order has been returned",
        "description": "The returned items have been received and processed.",
        "progress": 100,
    },
    OrderStatus.REFUNDED: {
        "message": "Your order has been refunded",
        "description": "The refund for your order has been processed.",
        "progress": 100,
    },
}

UNKNOWN_STATUS_INFO = {
    "message": "Order status unknown",
    "description": "We are unable to determine the status of your order.",
    "progress": 0,
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def can_cancel(current: str) -> bool:
    return current not in NON_CANCELLABLE_STATUSES


def is_terminal(status: str) -> bool:
    return not ALLOWED_TRANSITIONS.get(status)


def status_info(status: str) -> dict:
    return dict(STATUS_INFO.get(status, UNKNOWN_STATUS_INFO))
