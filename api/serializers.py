"""
API Serializers for Request/Response handling
"""
from rest_framework import serializers

from apps.catalog.models import Product, ProductColor, ProductImage, ProductSize
from apps.orders.models import Order, OrderItem
from apps.orders.status import OrderStatus


# ----------------------------------------------------------------------
# Catalog
# ----------------------------------------------------------------------

class ProductSizeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductSize
        fields = ['size', 'quantity']


class ProductColorSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductColor
        fields = ['name', 'code']


class ProductImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductImage
        fields = ['url', 'is_main']


class ProductSerializer(serializers.ModelSerializer):
    """
    Product as returned by the catalog endpoints.
    """
    sizes = ProductSizeSerializer(many=True, read_only=True)
    colors = ProductColorSerializer(many=True, read_only=True)
    images = ProductImageSerializer(many=True, read_only=True)
    in_stock = serializers.BooleanField(read_only=True)
    total_stock = serializers.IntegerField(read_only=True)
    final_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    main_image = serializers.CharField(read_only=True, allow_null=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'description', 'price', 'discount_price', 'final_price',
            'category', 'subcategory', 'brand', 'rating', 'num_reviews', 'sold',
            'is_featured', 'is_active', 'tags', 'material', 'care_instructions', 'origin',
            'sizes', 'colors', 'images', 'in_stock', 'total_stock', 'main_image',
            'created_at', 'updated_at',
        ]


class ProductWriteSerializer(serializers.Serializer):
    """
    Request body for creating or updating a product.
    """
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=1000)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    discount_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    category = serializers.ChoiceField(choices=Product.CATEGORY_CHOICES)
    subcategory = serializers.CharField(max_length=100)
    brand = serializers.CharField(max_length=100)
    rating = serializers.DecimalField(max_digits=2, decimal_places=1, min_value=1, max_value=5, required=False)
    num_reviews = serializers.IntegerField(min_value=0, required=False)
    is_featured = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    material = serializers.CharField(max_length=100, required=False, allow_blank=True)
    care_instructions = serializers.CharField(max_length=255, required=False, allow_blank=True)
    origin = serializers.CharField(max_length=100, required=False, allow_blank=True)
    sizes = ProductSizeSerializer(many=True, required=False)
    colors = ProductColorSerializer(many=True, required=False)
    images = ProductImageSerializer(many=True, required=False)

    def validate_sizes(self, value):
        names = [entry['size'] for entry in value]
        if len(names) != len(set(names)):
            raise serializers.ValidationError("Each size may only be listed once")
        return value

    def validate(self, attrs):
        price = attrs.get('price', getattr(self.instance, 'price', None))
        discount = attrs.get('discount_price', getattr(self.instance, 'discount_price', None))
        if discount is not None and price is not None and discount >= price:
            raise serializers.ValidationError(
                {"discount_price": "Discount price must be less than regular price"}
            )
        return attrs


# ----------------------------------------------------------------------
# Orders - requests
# ----------------------------------------------------------------------

class ColorSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50)
    code = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')


class OrderItemInputSerializer(serializers.Serializer):
    product = serializers.CharField(help_text="Product id")
    quantity = serializers.IntegerField(min_value=1)
    size = serializers.ChoiceField(choices=ProductSize.SIZE_CHOICES)
    color = ColorSerializer(required=False)


class ShippingInfoSerializer(serializers.Serializer):
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    country = serializers.CharField(max_length=100)
    zip_code = serializers.CharField(max_length=20)
    phone = serializers.CharField(max_length=30)


class PaymentInfoInputSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES, default='credit_card')
    id = serializers.CharField(max_length=100, required=False, allow_blank=True)


class OrderCreateSerializer(serializers.Serializer):
    """
    Request body for placing an order. Client prices are accepted but the
    server recomputes them.
    """
    order_items = OrderItemInputSerializer(many=True)
    shipping_info = ShippingInfoSerializer()
    payment_info = PaymentInfoInputSerializer(required=False)
    items_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    tax_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    shipping_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class PayerSerializer(serializers.Serializer):
    email_address = serializers.EmailField(required=False, allow_blank=True)


class PaymentResultSerializer(serializers.Serializer):
    """
    Payment provider callback payload.
    """
    id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    status = serializers.CharField(max_length=50, required=False, allow_blank=True)
    update_time = serializers.CharField(max_length=100, required=False, allow_blank=True)
    payer = PayerSerializer(required=False)


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


# ----------------------------------------------------------------------
# Orders - responses
# ----------------------------------------------------------------------

class OrderItemSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(source='unit_price', max_digits=10, decimal_places=2)
    color = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = ['product', 'name', 'price', 'quantity', 'size', 'color', 'image']

    def get_color(self, obj):
        if not obj.color_name:
            return None
        return {"name": obj.color_name, "code": obj.color_code}


class OrderSerializer(serializers.ModelSerializer):
    """
    Order as returned by every order endpoint.
    """
    user = serializers.SerializerMethodField()
    order_items = OrderItemSerializer(source='items', many=True, read_only=True)
    shipping_info = serializers.SerializerMethodField()
    payment_info = serializers.SerializerMethodField()
    status_info = serializers.DictField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'user', 'order_items', 'shipping_info', 'payment_info',
            'is_paid', 'paid_at', 'items_price', 'tax_price', 'shipping_price', 'total_price',
            'status', 'status_info', 'is_delivered', 'delivered_at', 'created_at', 'updated_at',
        ]

    def get_user(self, obj):
        user = obj.user
        return {"id": user.pk, "username": user.get_username(), "email": user.email}

    def get_shipping_info(self, obj):
        return {
            "address": obj.shipping_address,
            "city": obj.shipping_city,
            "state": obj.shipping_state,
            "country": obj.shipping_country,
            "zip_code": obj.shipping_zip_code,
            "phone": obj.shipping_phone,
        }

    def get_payment_info(self, obj):
        return {
            "id": obj.payment_id,
            "status": obj.payment_status,
            "payment_method": obj.payment_method,
            "update_time": obj.payment_update_time,
            "email_address": obj.payer_email,
            "amount_paid": str(obj.amount_paid),
        }


class HealthCheckSerializer(serializers.Serializer):
    """
    Response serializer for health check.
    """
    status = serializers.CharField()
    version = serializers.CharField()
    database = serializers.CharField()
    timestamp = serializers.DateTimeField()
