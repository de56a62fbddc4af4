"""
URL configuration for the Optician Marketplace
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin

# ===============================================================================
# MAIN URL PATTERNS
# ===============================================================================
from django.urls import include, path

urlpatterns = [
    # Back-office for catalog and reward management
    path("admin/", admin.site.urls),
    # API endpoints
    path("api/", include("apps.api.urls")),
]

# ===============================================================================
# DEVELOPMENT URLS (static files)
# ===============================================================================

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
