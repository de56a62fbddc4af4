"""
Django admin configuration for loyalty app.
"""

from typing import ClassVar

from django.contrib import admin

from .models import LoyaltyProduct, LoyaltyRedemption, LoyaltyRedemptionItem


@admin.register(LoyaltyProduct)
class LoyaltyProductAdmin(admin.ModelAdmin):
    list_display: ClassVar[tuple[str, ...]] = ("name", "points_cost", "product", "is_active")
    list_filter: ClassVar[tuple[str, ...]] = ("is_active",)
    search_fields: ClassVar[tuple[str, ...]] = ("name",)
    raw_id_fields: ClassVar[tuple[str, ...]] = ("product",)


class LoyaltyRedemptionItemInline(admin.TabularInline):
    model = LoyaltyRedemptionItem
    extra = 0
    readonly_fields: ClassVar[tuple[str, ...]] = (
        "loyalty_product", "product_name", "quantity", "points_cost", "total_points"
    )
    can_delete = False


@admin.register(LoyaltyRedemption)
class LoyaltyRedemptionAdmin(admin.ModelAdmin):
    """
    Read-only view of redemptions.
    Approval and rejection go through the API so balances stay consistent.
    """

    list_display: ClassVar[tuple[str, ...]] = ("id", "optician", "total_points", "status", "created_at")
    list_filter: ClassVar[tuple[str, ...]] = ("status", "created_at")
    search_fields: ClassVar[tuple[str, ...]] = ("optician__business_name", "optician__user__email")
    inlines: ClassVar[list] = [LoyaltyRedemptionItemInline]
    readonly_fields: ClassVar[tuple[str, ...]] = (
        "optician", "total_points", "status", "approved_at", "approved_by",
        "rejected_at", "rejected_by", "rejection_reason", "created_at", "updated_at",
    )

    def has_add_permission(self, request):
        return False
