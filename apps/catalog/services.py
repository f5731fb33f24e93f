"""
Catalog service - product lookup and admin maintenance
"""
import logging
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.core.exceptions import NotFoundException, ValidationException
from apps.core.utils import parse_uuid
from .models import Product, ProductColor, ProductImage, ProductSize

logger = logging.getLogger(__name__)

NESTED_FIELDS = ('sizes', 'colors', 'images')


def _with_related(queryset):
    return queryset.prefetch_related('sizes', 'colors', 'images')


def list_products(category: Optional[str] = None, featured: Optional[bool] = None) -> List[Product]:
    queryset = Product.objects.filter(is_active=True)
    if category:
        queryset = queryset.filter(category=category)
    if featured is not None:
        queryset = queryset.filter(is_featured=featured)
    return list(_with_related(queryset))


def get_product(product_id: Any) -> Product:
    pk = parse_uuid(product_id)
    if pk is None:
        raise NotFoundException("Product", product_id)
    try:
        return _with_related(Product.objects).get(pk=pk)
    except Product.DoesNotExist:
        raise NotFoundException("Product", product_id)


def _validate(product: Product) -> None:
    try:
        product.full_clean()
    except DjangoValidationError as e:
        raise ValidationException("Invalid product", details=e.message_dict)


def _replace_nested(product: Product, data: Dict[str, Any]) -> None:
    if 'sizes' in data:
        sizes = data['sizes'] or []
        seen = set()
        for entry in sizes:
            if entry['size'] in seen:
                raise ValidationException(f"Duplicate size: {entry['size']}", field="sizes")
            seen.add(entry['size'])
        product.sizes.all().delete()
        ProductSize.objects.bulk_create([
            ProductSize(product=product, size=entry['size'], quantity=entry.get('quantity', 0))
            for entry in sizes
        ])

    if 'colors' in data:
        product.colors.all().delete()
        ProductColor.objects.bulk_create([
            ProductColor(product=product, name=entry['name'], code=entry['code'])
            for entry in data['colors'] or []
        ])

    if 'images' in data:
        product.images.all().delete()
        ProductImage.objects.bulk_create([
            ProductImage(product=product, url=entry['url'], is_main=entry.get('is_main', False))
            for entry in data['images'] or []
        ])


def create_product(data: Dict[str, Any]) -> Product:
    fields = {key: value for key, value in data.items() if key not in NESTED_FIELDS}
    product = Product(**fields)
    _validate(product)

    with transaction.atomic():
        product.save()
        _replace_nested(product, data)

    logger.info(f"Product {product.id} created: {product.name}")
    return get_product(product.id)


def update_product(product_id: Any, data: Dict[str, Any]) -> Product:
    """
    Update scalar fields in place; nested sizes, colors and images are
    replaced wholesale when present in data. Existing orders keep their
    snapshots.
    """
    product = get_product(product_id)
    for key, value in data.items():
        if key not in NESTED_FIELDS:
            setattr(product, key, value)
    _validate(product)

    with transaction.atomic():
        product.save()
        _replace_nested(product, data)

    logger.info(f"Product {product.id} updated")
    return get_product(product.id)


def delete_product(product_id: Any) -> None:
    product = get_product(product_id)
    product.delete()
    logger.info(f"Product {product_id} deleted")
