"""
Django admin configuration for products app.
Eyewear catalog management interface.
"""

from typing import Any, ClassVar

from django import forms
from django.contrib import admin, messages
from django.http import HttpRequest

from .models import Product
from .services import ProductStockService

# Written only by ProductStockService
STOCK_FIELDS = frozenset({"stock_qty", "in_stock"})


class ProductAdminForm(forms.ModelForm):
    set_stock_to = forms.IntegerField(
        required=False,
        min_value=0,
        help_text="Leave blank to keep the current stock",
    )

    class Meta:
        model = Product
        exclude: ClassVar[tuple[str, ...]] = ("stock_qty", "in_stock")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for products."""

    form = ProductAdminForm

    list_display: ClassVar[tuple[str, ...]] = (
        "name", "reference", "brand", "price", "sale_price", "stock_qty", "in_stock", "is_active"
    )
    list_filter: ClassVar[tuple[str, ...]] = ("is_active", "in_stock", "brand")
    search_fields: ClassVar[tuple[str, ...]] = ("name", "reference", "brand")

    fieldsets: ClassVar[tuple] = (
        ("Basic Information", {"fields": ("name", "reference", "brand", "description", "image_url")}),
        ("Pricing", {"fields": ("price", "sale_price", "first_order_discount_pct")}),
        ("Stock & Loyalty", {"fields": ("stock_qty", "in_stock", "set_stock_to", "loyalty_points_reward", "is_active")}),
    )

    readonly_fields: ClassVar[tuple[str, ...]] = ("stock_qty", "in_stock", "created_at", "updated_at")

    def save_model(self, request: HttpRequest, obj: Product, form: forms.ModelForm, change: bool) -> None:
        if change:
            editable = [
                field.name
                for field in Product._meta.concrete_fields
                if not field.primary_key and field.name not in STOCK_FIELDS
            ]
            obj.save(update_fields=editable)
        else:
            obj.save()

        new_stock: Any = form.cleaned_data.get("set_stock_to")
        if new_stock is None:
            return
        result = ProductStockService.set_stock(obj.pk, new_stock, request.user.email)
        if result.is_err():
            self.message_user(request, result.unwrap_err().message, level=messages.ERROR)
        else:
            obj.stock_qty = result.unwrap().stock_qty
