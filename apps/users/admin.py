"""
Django admin configuration for Users app
"""

from typing import ClassVar

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Email-based user admin with marketplace role"""

    list_display: ClassVar[tuple[str, ...]] = ("email", "get_full_name", "role", "is_active", "last_login")
    list_filter: ClassVar[tuple[str, ...]] = ("role", "is_active", "is_staff")
    search_fields: ClassVar[tuple[str, ...]] = ("email", "first_name", "last_name")
    ordering: ClassVar[tuple[str, ...]] = ("email",)

    fieldsets: ClassVar[tuple] = (
        (None, {"fields": ("email", "password")}),
        ("Personal info", {"fields": ("first_name", "last_name")}),
        ("Marketplace role", {"fields": ("role",)}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets: ClassVar[tuple] = (
        (None, {"classes": ("wide",), "fields": ("email", "role", "password1", "password2")}),
    )
