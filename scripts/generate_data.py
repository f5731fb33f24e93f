"""
Synthetic Data Generator for the Storefront API

This script seeds users (with API tokens), a product catalog with per-size
stock, and a batch of orders placed through the order lifecycle so stock
levels stay consistent with the order ledger.
"""
import os
import sys
import random
from decimal import Decimal

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Setup Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django
django.setup()

from django.contrib.auth import get_user_model
from faker import Faker
from rest_framework.authtoken.models import Token

from apps.catalog import services as catalog
from apps.catalog.models import Product, ProductSize
from apps.core.exceptions import OutOfStockException
from apps.orders.access import Requester
from apps.orders.models import Order
from apps.orders.services import OrderLifecycleController
from apps.orders.status import OrderStatus

fake = Faker()
User = get_user_model()


def generate_users(count=20):
    """Generate customers plus one admin, each with a token."""
    print(f"Generating {count} users...")
    users = []

    admin, _ = User.objects.get_or_create(
        username='admin',
        defaults={'email': 'admin@example.com', 'is_staff': True}
    )
    admin.set_password('admin')
    admin.save()
    token, _ = Token.objects.get_or_create(user=admin)
    print(f"Admin token: {token.key}")

    for _ in range(count):
        user = User.objects.create_user(
            username=fake.unique.user_name(),
            email=fake.unique.email(),
            password='password',
        )
        Token.objects.get_or_create(user=user)
        users.append(user)

    print(f"Created {len(users)} users")
    return admin, users


def generate_products(count=40):
    """Generate products with sizes, colors and images."""
    print(f"Generating {count} products...")

    product_templates = [
        ('Cotton T-Shirt', 'casual', 'tops', 9.99, 29.99),
        ('Denim Jeans', 'men', 'trousers', 29.99, 89.99),
        ('Summer Dress', 'women', 'dresses', 24.99, 99.99),
        ('Winter Jacket', 'casual', 'outerwear', 59.99, 199.99),
        ('Running Shoes', 'shoes', 'sneakers', 39.99, 149.99),
        ('Track Pants', 'sportswear', 'bottoms', 19.99, 59.99),
        ('Wool Suit', 'formal', 'suits', 149.99, 399.99),
        ('Leather Belt', 'accessories', 'belts', 9.99, 49.99),
        ('Kids Hoodie', 'kids', 'tops', 14.99, 39.99),
    ]
    colors = [('Black', '#000000'), ('White', '#FFFFFF'), ('Navy', '#000080'), ('Red', '#FF0000')]

    products = []

    for template in product_templates:
        name_base, category, subcategory, min_price, max_price = template
        for _ in range(count // len(product_templates) + 1):
            if len(products) >= count:
                break

            price = Decimal(str(round(random.uniform(min_price, max_price), 2)))
            discount = None
            if random.random() < 0.3:
                discount = (price * Decimal('0.8')).quantize(Decimal('0.01'))

            sizes = random.sample([choice for choice, _ in ProductSize.SIZE_CHOICES[:7]], k=4)
            product = catalog.create_product({
                'name': f"{fake.company().split()[0]} {name_base}"[:100],
                'description': fake.paragraph(nb_sentences=3),
                'price': price,
                'discount_price': discount,
                'category': category,
                'subcategory': subcategory,
                'brand': fake.company()[:100],
                'is_featured': random.random() < 0.2,
                'tags': fake.words(nb=3),
                'sizes': [{'size': size, 'quantity': random.randint(0, 25)} for size in sizes],
                'colors': [{'name': name, 'code': code} for name, code in random.sample(colors, k=2)],
                'images': [{'url': fake.image_url(), 'is_main': True}],
            })
            products.append(product)

    print(f"Created {len(products)} products")
    return products


def generate_orders(admin, users, products, count=60):
    """Place orders through the lifecycle controller and move some along."""
    print(f"Generating {count} orders...")
    controller = OrderLifecycleController()
    admin_requester = Requester.from_user(admin)
    orders = []

    for _ in range(count):
        user = random.choice(users)
        requester = Requester.from_user(user)
        product = random.choice(products)
        sizes = [s for s in product.sizes.all() if s.quantity > 0]
        if not sizes:
            continue

        size = random.choice(sizes)
        try:
            order = controller.create_order(
                requester=requester,
                items=[{
                    'product': str(product.id),
                    'quantity': random.randint(1, min(3, size.quantity)),
                    'size': size.size,
                }],
                shipping_info={
                    'address': fake.street_address(),
                    'city': fake.city(),
                    'state': fake.state(),
                    'country': fake.country()[:100],
                    'zip_code': fake.postcode(),
                    'phone': fake.phone_number()[:30],
                },
                payment_info={'payment_method': random.choice(['credit_card', 'paypal', 'cash_on_delivery'])},
            )
        except OutOfStockException as e:
            print(f"Skipped order: {e.message}")
            continue

        if random.random() < 0.7:
            controller.mark_paid(order.id, requester, {
                'id': f"PAY-{fake.uuid4()[:8].upper()}",
                'status': 'COMPLETED',
                'update_time': fake.iso8601(),
                'payer': {'email_address': user.email},
            })

        outcome = random.choices(
            ['processing', 'shipped', 'delivered', 'cancelled'],
            weights=[30, 25, 35, 10]
        )[0]
        if outcome == 'shipped':
            controller.set_status(order.id, admin_requester, OrderStatus.SHIPPED)
        elif outcome == 'delivered':
            controller.mark_delivered(order.id, admin_requester)
        elif outcome == 'cancelled':
            controller.cancel_order(order.id, requester)

        orders.append(order)

    print(f"Created {len(orders)} orders")
    return orders


def main():
    print("=" * 50)
    print("Storefront - Synthetic Data Generator")
    print("=" * 50)

    admin, users = generate_users()
    products = [
        Product.objects.prefetch_related('sizes').get(pk=p.pk)
        for p in generate_products()
    ]
    generate_orders(admin, users, products)

    print("=" * 50)
    print(f"Products: {Product.objects.count()}, Orders: {Order.objects.count()}")
    print("Data generation complete!")


if __name__ == '__main__':
    main()
