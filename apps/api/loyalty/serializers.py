"""
Loyalty API Serializers for the Optician Marketplace
"""

from rest_framework import serializers

from apps.common.validators import MAX_ITEMS_PER_REQUEST, MAX_REASON_LENGTH, SecureInputValidator
from apps.loyalty.models import LoyaltyProduct, LoyaltyRedemption, LoyaltyRedemptionItem


class LoyaltyProductSerializer(serializers.ModelSerializer):
    """Reward catalog entry"""

    in_stock = serializers.SerializerMethodField()

    class Meta:
        model = LoyaltyProduct
        fields = ["id", "name", "description", "points_cost", "image_url", "product", "in_stock"]

    def get_in_stock(self, obj: LoyaltyProduct) -> bool:
        return obj.product.in_stock if obj.product_id else True


class RedemptionItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyRedemptionItem
        fields = ["id", "loyalty_product", "product_name", "quantity", "points_cost", "total_points", "image_url"]


class RedemptionSerializer(serializers.ModelSerializer):
    """Redemption with its snapshotted lines"""

    items = RedemptionItemSerializer(many=True, read_only=True)
    optician_name = serializers.CharField(source="optician.business_name", read_only=True)

    class Meta:
        model = LoyaltyRedemption
        fields = [
            "id",
            "optician",
            "optician_name",
            "total_points",
            "status",
            "approved_at",
            "approved_by",
            "rejected_at",
            "rejected_by",
            "rejection_reason",
            "created_at",
            "items",
        ]


# ===============================================================================
# INPUT SERIALIZERS
# ===============================================================================


class RedeemItemInputSerializer(serializers.Serializer):
    loyalty_product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class RedeemInputSerializer(serializers.Serializer):
    """🎁 Redemption request; `total_points` is informational only"""

    items = RedeemItemInputSerializer(many=True, allow_empty=False, max_length=MAX_ITEMS_PER_REQUEST)
    total_points = serializers.IntegerField(required=False, min_value=0)


class RejectInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=MAX_REASON_LENGTH)

    def validate_reason(self, value: str) -> str:
        return SecureInputValidator.validate_text(value, MAX_REASON_LENGTH)


class RedemptionItemActionSerializer(serializers.Serializer):
    ACTION_APPROVE = "approve"
    ACTION_REJECT = "reject"

    action = serializers.ChoiceField(choices=[ACTION_APPROVE, ACTION_REJECT])
    reason = serializers.CharField(required=False, allow_blank=True, max_length=MAX_REASON_LENGTH)

    def validate_reason(self, value: str) -> str:
        return SecureInputValidator.validate_text(value, MAX_REASON_LENGTH)
