"""
Django admin configuration for orders app.
"""

from typing import ClassVar

from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields: ClassVar[tuple[str, ...]] = (
        "product", "product_name", "product_reference", "unit_price", "quantity",
        "line_total", "status", "confirmed_at", "confirmed_by",
    )


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Orders are reviewed line by line through the API; the admin is read-only"""

    list_display: ClassVar[tuple[str, ...]] = (
        "order_number", "optician", "status", "source", "total_amount", "currency", "created_at"
    )
    list_filter: ClassVar[tuple[str, ...]] = ("status", "source", "created_at")
    search_fields: ClassVar[tuple[str, ...]] = ("order_number", "optician__business_name", "optician__user__email")
    date_hierarchy = "created_at"
    inlines: ClassVar[list] = [OrderItemInline]
    readonly_fields: ClassVar[tuple[str, ...]] = (
        "order_number", "optician", "status", "source", "currency", "total_amount",
        "validated_at", "created_by", "created_at", "updated_at",
    )

    def has_add_permission(self, request):
        return False
