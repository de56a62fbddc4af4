"""
Django admin configuration for opticians app.
"""

from typing import Any, ClassVar

from django.contrib import admin
from django.http import HttpRequest

from .models import LoyaltyPointsTransaction, Optician

SERVICE_OWNED_FIELDS: tuple[str, ...] = ("status", "approved_at", "loyalty_points")


@admin.register(Optician)
class OpticianAdmin(admin.ModelAdmin):
    list_display: ClassVar[tuple[str, ...]] = ("business_name", "city", "status", "loyalty_points", "created_at")
    list_filter: ClassVar[tuple[str, ...]] = ("status", "city")
    search_fields: ClassVar[tuple[str, ...]] = ("business_name", "user__email", "city", "phone")

    fieldsets: ClassVar[tuple] = (
        ("Account", {"fields": ("user", "status", "approved_at")}),
        ("Business", {"fields": ("business_name", "first_name", "last_name", "phone", "whatsapp")}),
        ("Location", {"fields": ("address", "city", "postal_code", "latitude", "longitude")}),
        ("Loyalty", {"fields": ("loyalty_points",)}),
    )

    # Status and balance change only through their services
    readonly_fields: ClassVar[tuple[str, ...]] = SERVICE_OWNED_FIELDS

    def save_model(self, request: HttpRequest, obj: Optician, form: Any, change: bool) -> None:
        if not change:
            obj.save()
            return
        editable = [
            field.name
            for field in Optician._meta.concrete_fields
            if not field.primary_key and field.name not in SERVICE_OWNED_FIELDS
        ]
        obj.save(update_fields=editable)


@admin.register(LoyaltyPointsTransaction)
class LoyaltyPointsTransactionAdmin(admin.ModelAdmin):
    list_display: ClassVar[tuple[str, ...]] = (
        "optician", "transaction_type", "points", "balance_after", "created_by", "created_at"
    )
    list_filter: ClassVar[tuple[str, ...]] = ("transaction_type", "created_at")
    search_fields: ClassVar[tuple[str, ...]] = ("optician__business_name", "reference", "description")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
