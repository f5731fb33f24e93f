"""Pytest fixtures for storefront tests."""

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from apps.catalog.models import ProductColor, ProductImage
from apps.orders.access import Requester
from apps.orders.services import OrderLifecycleController
from factories import make_product


@pytest.fixture(autouse=True)
def clear_cache():
    """Reset throttling state between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def customer(db):
    return get_user_model().objects.create_user(
        username="alice", email="alice@example.com", password="password"
    )


@pytest.fixture
def other_customer(db):
    return get_user_model().objects.create_user(
        username="bob", email="bob@example.com", password="password"
    )


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_user(
        username="admin", email="admin@example.com", password="password", is_staff=True
    )


@pytest.fixture
def customer_requester(customer):
    return Requester.from_user(customer)


@pytest.fixture
def other_requester(other_customer):
    return Requester.from_user(other_customer)


@pytest.fixture
def admin_requester(admin_user):
    return Requester.from_user(admin_user)


@pytest.fixture
def controller():
    return OrderLifecycleController()


@pytest.fixture
def product(db):
    product = make_product(name="Basic Tee", price="20.00", sizes={"S": 5, "M": 2, "L": 0})
    ProductColor.objects.create(product=product, name="Black", code="#000000")
    ProductImage.objects.create(product=product, url="https://cdn.example.com/tee-back.jpg")
    ProductImage.objects.create(product=product, url="https://cdn.example.com/tee.jpg", is_main=True)
    return product


@pytest.fixture
def expensive_product(db):
    return make_product(name="Wool Coat", price="100.00", sizes={"L": 3}, category="formal")


@pytest.fixture
def shipping_info():
    return {
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "country": "US",
        "zip_code": "62701",
        "phone": "555-0100",
    }


@pytest.fixture
def place_order(controller, shipping_info):
    """Place an order through the controller."""
    def _place(requester, product, quantity=1, size="M", **kwargs):
        return controller.create_order(
            requester=requester,
            items=[{"product": str(product.id), "quantity": quantity, "size": size}],
            shipping_info=shipping_info,
            payment_info={"payment_method": "credit_card"},
            **kwargs,
        )
    return _place


def _client_for(user):
    client = APIClient()
    token, _ = Token.objects.get_or_create(user=user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.key}")
    return client


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def customer_client(customer):
    return _client_for(customer)


@pytest.fixture
def other_client(other_customer):
    return _client_for(other_customer)


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)
