# ===============================================================================
# API CORE INFRASTRUCTURE 🏗️
# ===============================================================================

from .errors import invalid_input_response, service_error_response
from .pagination import StandardResultsSetPagination
from .permissions import IsAdminRole, IsOpticianRole, get_request_optician
from .throttling import CampaignThrottle, NearestSearchThrottle, OrderCreateThrottle, RedeemThrottle

__all__ = [
    "CampaignThrottle",
    "IsAdminRole",
    "IsOpticianRole",
    "NearestSearchThrottle",
    "OrderCreateThrottle",
    "RedeemThrottle",
    "StandardResultsSetPagination",
    "get_request_optician",
    "invalid_input_response",
    "service_error_response",
]
