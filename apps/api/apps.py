# ===============================================================================
# MARKETPLACE API APP CONFIGURATION 🛠️
# ===============================================================================

from django.apps import AppConfig


class ApiConfig(AppConfig):
    """REST endpoints for every marketplace domain"""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.api"
    label = "marketplace_api"
    verbose_name = "Marketplace API"
