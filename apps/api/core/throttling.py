# ===============================================================================
# API THROTTLING CLASSES 🚦
# ===============================================================================

from rest_framework.throttling import ScopedRateThrottle


class RedeemThrottle(ScopedRateThrottle):
    """Redemption requests"""

    scope = "redeem"


class OrderCreateThrottle(ScopedRateThrottle):
    """Order submission; listing on the same route is not throttled"""

    scope = "order_create"

    def allow_request(self, request, view):
        if request.method != "POST":
            return True
        return super().allow_request(request, view)


class NearestSearchThrottle(ScopedRateThrottle):
    """Public proximity search"""

    scope = "nearest"


class CampaignThrottle(ScopedRateThrottle):
    """Admin broadcasts"""

    scope = "campaign"
