# ===============================================================================
# MARKETPLACE API MAIN URLS 🚀
# ===============================================================================
#
# URL Structure:
#   /api/loyalty/    → Reward catalog and redemptions
#   /api/orders/     → Order submission, review and manual entry
#   /api/products/   → Stock administration
#   /api/opticians/  → Proximity search, approval, points, geocoding
#   /api/campaigns/  → Email and WhatsApp broadcasts
#

from django.urls import include, path

app_name = "api"

urlpatterns = [
    path("loyalty/", include("apps.api.loyalty.urls")),
    path("orders/", include("apps.api.orders.urls")),
    path("products/", include("apps.api.products.urls")),
    path("opticians/", include("apps.api.opticians.urls")),
    path("campaigns/", include("apps.api.campaigns.urls")),
]
