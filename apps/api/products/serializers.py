"""
Product API Serializers for the Optician Marketplace
"""

from rest_framework import serializers

from apps.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Catalog entry as opticians browse it"""

    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "reference",
            "brand",
            "description",
            "image_url",
            "price",
            "sale_price",
            "effective_price",
            "first_order_discount_pct",
            "loyalty_points_reward",
            "stock_qty",
            "in_stock",
        ]


class ProductStockSerializer(serializers.ModelSerializer):
    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = ["id", "name", "reference", "price", "sale_price", "effective_price", "stock_qty", "in_stock"]


class StockUpdateInputSerializer(serializers.Serializer):
    stock_qty = serializers.IntegerField(min_value=0)
