"""
Django app configuration for Opticians app
"""

from django.apps import AppConfig


class OpticiansConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.opticians"
    verbose_name = "Opticians"
