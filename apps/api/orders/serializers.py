"""
Order API Serializers for the Optician Marketplace
"""

from rest_framework import serializers

from apps.common.validators import MAX_ITEMS_PER_REQUEST, MAX_NOTE_LENGTH, SecureInputValidator
from apps.orders.models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    """Order line with its price snapshot"""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "product_reference",
            "unit_price",
            "sale_price",
            "discount_pct",
            "quantity",
            "line_total",
            "status",
            "confirmed_at",
            "confirmed_by",
        ]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    optician_name = serializers.CharField(source="optician.business_name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "optician",
            "optician_name",
            "status",
            "source",
            "currency",
            "total_amount",
            "note",
            "validated_at",
            "created_by",
            "created_at",
            "items",
        ]


# ===============================================================================
# INPUT SERIALIZERS
# ===============================================================================


class OrderLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateInputSerializer(serializers.Serializer):
    """🛒 Optician order submission"""

    items = OrderLineInputSerializer(many=True, allow_empty=False, max_length=MAX_ITEMS_PER_REQUEST)
    note = serializers.CharField(required=False, allow_blank=True, max_length=MAX_NOTE_LENGTH)

    def validate_note(self, value: str) -> str:
        return SecureInputValidator.validate_text(value, MAX_NOTE_LENGTH)


class ManualOrderInputSerializer(OrderCreateInputSerializer):
    """📝 Admin-entered order on behalf of an optician"""

    optician_id = serializers.UUIDField()


class OrderItemActionSerializer(serializers.Serializer):
    ACTION_CONFIRM = "confirm"
    ACTION_CANCEL = "cancel"

    action = serializers.ChoiceField(choices=[ACTION_CONFIRM, ACTION_CANCEL])
