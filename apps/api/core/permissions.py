# ===============================================================================
# API PERMISSIONS CLASSES 🔐
# ===============================================================================

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rest_framework import permissions

from apps.common.request_ip import get_safe_client_ip
from apps.common.validators import log_security_event

if TYPE_CHECKING:
    from rest_framework.request import Request

    from apps.opticians.models import Optician


def get_request_optician(request: Request) -> Optician | None:
    """Optician profile of the authenticated user, if any"""
    user = request.user
    if not user or not user.is_authenticated:
        return None
    return getattr(user, "optician", None)


class IsAdminRole(permissions.BasePermission):
    """Marketplace administrators only"""

    message = "Administrator access required"

    def has_permission(self, request: Request, view: Any) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_admin_role:
            return True
        log_security_event(
            "admin_endpoint_denied",
            {"user": user.email, "path": request.path},
            request_ip=get_safe_client_ip(request),
        )
        return False


class IsOpticianRole(permissions.BasePermission):
    """Authenticated opticians that have a business profile"""

    message = "Optician account required"

    def has_permission(self, request: Request, view: Any) -> bool:
        user = request.user
        if not user or not user.is_authenticated or not user.is_optician_role:
            return False
        return get_request_optician(request) is not None
