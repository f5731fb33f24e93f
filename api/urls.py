"""
API URL Configuration
"""
from django.urls import path
from rest_framework.authtoken.views import obtain_auth_token

from .views import (
    HealthCheckView,
    MyOrdersView,
    OrderCancelView,
    OrderDeliverView,
    OrderDetailView,
    OrderListCreateView,
    OrderPayView,
    OrderStatusView,
    ProductDetailView,
    ProductListCreateView,
)

app_name = 'api'

urlpatterns = [
    # Orders
    path('orders/', OrderListCreateView.as_view(), name='order-list'),
    path('orders/myorders/', MyOrdersView.as_view(), name='order-mine'),
    path('orders/<str:order_id>/', OrderDetailView.as_view(), name='order-detail'),
    path('orders/<str:order_id>/pay/', OrderPayView.as_view(), name='order-pay'),
    path('orders/<str:order_id>/deliver/', OrderDeliverView.as_view(), name='order-deliver'),
    path('orders/<str:order_id>/cancel/', OrderCancelView.as_view(), name='order-cancel'),
    path('orders/<str:order_id>/status/', OrderStatusView.as_view(), name='order-status'),

    # Products
    path('products/', ProductListCreateView.as_view(), name='product-list'),
    path('products/<str:product_id>/', ProductDetailView.as_view(), name='product-detail'),

    # Auth
    path('auth/token/', obtain_auth_token, name='auth-token'),

    # Health check
    path('health/', HealthCheckView.as_view(), name='health'),
]
