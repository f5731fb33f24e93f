"""
API Views for the Storefront

This module provides REST API endpoints for:
- Orders: create, fetch, pay, deliver, cancel and admin status changes
- Products: public catalog browsing and admin maintenance
- Health Check: System health and status
"""
import logging
from datetime import datetime, timezone

from rest_framework.views import APIView
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from drf_spectacular.utils import extend_schema, OpenApiExample

from django.db import connection

from apps.catalog import services as catalog
from apps.core.exceptions import ValidationException
from apps.orders.access import AccessPolicy, Requester
from apps.orders.services import OrderLifecycleController
from .responses import envelope
from .serializers import (
    HealthCheckSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    PaymentResultSerializer,
    ProductSerializer,
    ProductWriteSerializer,
)

logger = logging.getLogger(__name__)


def _validated(serializer_class, data, **kwargs):
    serializer = serializer_class(data=data, **kwargs)
    if not serializer.is_valid():
        raise ValidationException("Invalid request", details=serializer.errors)
    return serializer.validated_data


class OrderAPIView(APIView):
    """
    Base view wiring the lifecycle controller to the authenticated caller.
    """
    permission_classes = [IsAuthenticated]
    controller_class = OrderLifecycleController

    def get_controller(self) -> OrderLifecycleController:
        return self.controller_class()

    def get_requester(self, request) -> Requester:
        return Requester.from_user(request.user)


class OrderListCreateView(OrderAPIView):
    """
    POST: place an order for the caller.
    GET: list every order (admin only).
    """

    @extend_schema(
        request=OrderCreateSerializer,
        responses={201: OrderSerializer},
        description="Create an order from the caller's cart",
        examples=[
            OpenApiExample(
                "Order Request",
                value={
                    "order_items": [
                        {
                            "product": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                            "quantity": 2,
                            "size": "M",
                            "color": {"name": "Black", "code": "#000000"}
                        }
                    ],
                    "shipping_info": {
                        "address": "1 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "country": "US",
                        "zip_code": "62701",
                        "phone": "555-0100"
                    },
                    "payment_info": {"payment_method": "credit_card"}
                },
                request_only=True
            ),
        ]
    )
    def post(self, request):
        data = _validated(OrderCreateSerializer, request.data)
        prices = {
            name: data[name]
            for name in ('items_price', 'tax_price', 'shipping_price', 'total_price')
            if name in data
        }

        order = self.get_controller().create_order(
            requester=self.get_requester(request),
            items=data['order_items'],
            shipping_info=data['shipping_info'],
            payment_info=data.get('payment_info'),
            prices=prices,
        )
        return envelope(OrderSerializer(order).data, status_code=status.HTTP_201_CREATED)

    @extend_schema(
        responses={200: OrderSerializer(many=True)},
        description="List all orders (admin only)"
    )
    def get(self, request):
        orders = self.get_controller().list_all(self.get_requester(request))
        return envelope(OrderSerializer(orders, many=True).data, count=len(orders))


class MyOrdersView(OrderAPIView):

    @extend_schema(
        responses={200: OrderSerializer(many=True)},
        description="List the caller's orders"
    )
    def get(self, request):
        orders = self.get_controller().list_mine(self.get_requester(request))
        return envelope(OrderSerializer(orders, many=True).data, count=len(orders))


class OrderDetailView(OrderAPIView):

    @extend_schema(
        responses={200: OrderSerializer},
        description="Fetch one order (owner or admin)"
    )
    def get(self, request, order_id):
        order = self.get_controller().get_order(order_id, self.get_requester(request))
        return envelope(OrderSerializer(order).data)


class OrderPayView(OrderAPIView):

    @extend_schema(
        request=PaymentResultSerializer,
        responses={200: OrderSerializer},
        description="Record the payment result for an order (owner or admin)"
    )
    def put(self, request, order_id):
        payload = _validated(PaymentResultSerializer, request.data)
        order = self.get_controller().mark_paid(order_id, self.get_requester(request), payload)
        return envelope(OrderSerializer(order).data)


class OrderDeliverView(OrderAPIView):

    @extend_schema(
        request=None,
        responses={200: OrderSerializer},
        description="Mark an order as delivered (admin only)"
    )
    def put(self, request, order_id):
        order = self.get_controller().mark_delivered(order_id, self.get_requester(request))
        return envelope(OrderSerializer(order).data)


class OrderCancelView(OrderAPIView):

    @extend_schema(
        request=None,
        description="Cancel an order that has not shipped (owner or admin)"
    )
    def put(self, request, order_id):
        self.get_controller().cancel_order(order_id, self.get_requester(request))
        return envelope({})


class OrderStatusView(OrderAPIView):

    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={200: OrderSerializer},
        description="Move an order along its lifecycle (admin only)"
    )
    def put(self, request, order_id):
        data = _validated(OrderStatusUpdateSerializer, request.data)
        order = self.get_controller().set_status(order_id, self.get_requester(request), data['status'])
        return envelope(OrderSerializer(order).data)


class ProductAPIView(APIView):
    """
    Reads are public; writes need an admin.
    """
    access = AccessPolicy()

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated()]

    def ensure_admin(self, request, action):
        self.access.ensure_admin(Requester.from_user(request.user), action)


class ProductListCreateView(ProductAPIView):

    @extend_schema(
        responses={200: ProductSerializer(many=True)},
        description="List active products, optionally by category or featured flag"
    )
    def get(self, request):
        featured = request.query_params.get('featured')
        products = catalog.list_products(
            category=request.query_params.get('category'),
            featured=None if featured is None else featured.lower() in ('1', 'true', 'yes'),
        )
        return envelope(ProductSerializer(products, many=True).data, count=len(products))

    @extend_schema(
        request=ProductWriteSerializer,
        responses={201: ProductSerializer},
        description="Create a product (admin only)"
    )
    def post(self, request):
        self.ensure_admin(request, "create products")
        data = _validated(ProductWriteSerializer, request.data)
        product = catalog.create_product(data)
        return envelope(ProductSerializer(product).data, status_code=status.HTTP_201_CREATED)


class ProductDetailView(ProductAPIView):

    @extend_schema(responses={200: ProductSerializer}, description="Fetch one product")
    def get(self, request, product_id):
        product = catalog.get_product(product_id)
        return envelope(ProductSerializer(product).data)

    @extend_schema(
        request=ProductWriteSerializer,
        responses={200: ProductSerializer},
        description="Update a product (admin only); nested lists are replaced"
    )
    def put(self, request, product_id):
        self.ensure_admin(request, "update products")
        product = catalog.get_product(product_id)
        data = _validated(ProductWriteSerializer, request.data, instance=product, partial=True)
        product = catalog.update_product(product_id, data)
        return envelope(ProductSerializer(product).data)

    @extend_schema(request=None, description="Delete a product (admin only)")
    def delete(self, request, product_id):
        self.ensure_admin(request, "delete products")
        catalog.delete_product(product_id)
        return envelope({})


class HealthCheckView(APIView):
    """
    System health check endpoint.

    Returns the status of the API and database connectivity.
    """
    permission_classes = [AllowAny]

    @extend_schema(
        responses={200: HealthCheckSerializer},
        description="Check system health status"
    )
    def get(self, request):
        db_status = "healthy"
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            db_status = f"unhealthy: {str(e)}"

        response_data = {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "version": "1.0.0",
            "database": db_status,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return envelope(response_data)
