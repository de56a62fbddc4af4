# ===============================================================================
# MARKETPLACE API - CENTRALIZED API MODULE 🚀
# ===============================================================================
#
# Structure:
#   - api/core/       → Shared API infrastructure (permissions, throttling, errors)
#   - api/loyalty/    → Loyalty catalog and redemption endpoints
#   - api/orders/     → Order submission and review endpoints
#   - api/opticians/  → Optician discovery and administration endpoints
#   - api/products/   → Product stock administration
#   - api/campaigns/  → Admin broadcast endpoints
#
# Import Direction:
#   api → apps.{domain}.services → apps.{domain}.models
#   Never import api modules from domain apps
#
