"""
Catalog Models - Product Catalog Store
Tables: Products, ProductSizes, ProductColors, ProductImages
"""
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from apps.core.models import BaseModel


class Product(BaseModel):
    """
    Product in the catalog. Stock is tracked per size.
    """
    CATEGORY_CHOICES = [
        ('men', 'Men'),
        ('women', 'Women'),
        ('kids', 'Kids'),
        ('accessories', 'Accessories'),
        ('shoes', 'Shoes'),
        ('sportswear', 'Sportswear'),
        ('formal', 'Formal'),
        ('casual', 'Casual'),
    ]

    name = models.CharField(max_length=100)
    description = models.TextField(max_length=1000)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    discount_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True,
        validators=[MinValueValidator(0)],
        help_text="Must be lower than the regular price"
    )
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    subcategory = models.CharField(max_length=100)
    brand = models.CharField(max_length=100)
    rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=5,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    num_reviews = models.PositiveIntegerField(default=0)
    sold = models.PositiveIntegerField(default=0)
    is_featured = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    tags = models.JSONField(default=list, blank=True)
    material = models.CharField(max_length=100, blank=True, default='')
    care_instructions = models.CharField(max_length=255, blank=True, default='')
    origin = models.CharField(max_length=100, blank=True, default='')

    class Meta:
        db_table = 'catalog_products'
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} (${self.price})"

    def clean(self):
        if self.discount_price is not None and self.price is not None and self.discount_price >= self.price:
            raise ValidationError({'discount_price': 'Discount price must be less than regular price'})

    @property
    def final_price(self):
        return self.discount_price if self.discount_price is not None else self.price

    @property
    def total_stock(self) -> int:
        return sum(size.quantity for size in self.sizes.all())

    @property
    def in_stock(self) -> bool:
        return any(size.quantity > 0 for size in self.sizes.all())

    @property
    def main_image(self):
        images = list(self.images.all())
        for image in images:
            if image.is_main:
                return image.url
        return images[0].url if images else None


class ProductSize(models.Model):
    """
    Available quantity of a product in one size.
    """
    SIZE_CHOICES = [
        ('XS', 'XS'),
        ('S', 'S'),
        ('M', 'M'),
        ('L', 'L'),
        ('XL', 'XL'),
        ('XXL', 'XXL'),
        ('XXXL', 'XXXL'),
        ('One Size', 'One Size'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='sizes')
    size = models.CharField(max_length=10, choices=SIZE_CHOICES)
    quantity = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'catalog_product_sizes'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['product', 'size'], name='unique_product_size'),
        ]

    def __str__(self):
        return f"{self.product.name} - {self.size}: {self.quantity}"


class ProductColor(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='colors')
    name = models.CharField(max_length=50)
    code = models.CharField(max_length=20)

    class Meta:
        db_table = 'catalog_product_colors'
        ordering = ['id']

    def __str__(self):
        return f"{self.name} ({self.code})"


class ProductImage(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='images')
    url = models.URLField(max_length=500)
    is_main = models.BooleanField(default=False)

    class Meta:
        db_table = 'catalog_product_images'
        ordering = ['id']

    def __str__(self):
        return self.url
