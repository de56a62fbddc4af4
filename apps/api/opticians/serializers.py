"""
Optician API Serializers for the Optician Marketplace
"""

import math

from rest_framework import serializers

from apps.common.validators import MAX_REASON_LENGTH
from apps.opticians.geolocation import format_distance
from apps.opticians.models import LoyaltyPointsTransaction, Optician


class OpticianSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = Optician
        fields = [
            "id",
            "email",
            "business_name",
            "first_name",
            "last_name",
            "phone",
            "whatsapp",
            "address",
            "city",
            "postal_code",
            "latitude",
            "longitude",
            "status",
            "approved_at",
            "loyalty_points",
        ]


class NearbyOpticianSerializer(serializers.ModelSerializer):
    """Public listing entry; `distance_km` comes from the serializer context"""

    distance_km = serializers.SerializerMethodField()
    distance = serializers.SerializerMethodField()

    class Meta:
        model = Optician
        fields = [
            "id",
            "business_name",
            "phone",
            "whatsapp",
            "address",
            "city",
            "postal_code",
            "latitude",
            "longitude",
            "distance_km",
            "distance",
        ]

    def _distance(self, obj: Optician) -> float:
        return self.context["distances"][obj.pk]

    def get_distance_km(self, obj: Optician) -> float:
        return round(self._distance(obj), 3)

    def get_distance(self, obj: Optician) -> str:
        return format_distance(self._distance(obj))


class PointsTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyPointsTransaction
        fields = ["id", "transaction_type", "points", "balance_after", "description", "reference", "created_at"]


# ===============================================================================
# INPUT SERIALIZERS
# ===============================================================================


def finite_coordinate(value: float | None) -> float | None:
    # min/max validators let NaN and infinities through
    if value is not None and not math.isfinite(value):
        raise serializers.ValidationError("Coordinate must be a finite number")
    return value


class NearestQuerySerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def validate_lat(self, value: float) -> float:
        return finite_coordinate(value)

    def validate_lng(self, value: float) -> float:
        return finite_coordinate(value)


class OpticianRegisterInputSerializer(serializers.Serializer):
    """🏪 Business profile submitted at sign-up"""

    business_name = serializers.CharField(max_length=200)
    first_name = serializers.CharField(required=False, allow_blank=True, max_length=100)
    last_name = serializers.CharField(required=False, allow_blank=True, max_length=100)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=30)
    whatsapp = serializers.CharField(required=False, allow_blank=True, max_length=30)
    address = serializers.CharField(required=False, allow_blank=True, max_length=300)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    postal_code = serializers.CharField(required=False, allow_blank=True, max_length=20)
    latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)

    def validate_latitude(self, value: float | None) -> float | None:
        return finite_coordinate(value)

    def validate_longitude(self, value: float | None) -> float | None:
        return finite_coordinate(value)


class OpticianStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[choice for choice, _ in Optician.STATUS_CHOICES])


class PointsAdjustInputSerializer(serializers.Serializer):
    points = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=MAX_REASON_LENGTH)

    def validate_points(self, value: int) -> int:
        if value == 0:
            raise serializers.ValidationError("Points delta must be non-zero")
        return value
