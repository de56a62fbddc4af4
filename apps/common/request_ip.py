"""
Client IP detection for audit logging.

Uses django-ipware and only honours proxy headers from IPWARE_TRUSTED_PROXY_LIST.
"""

from django.conf import settings
from django.http import HttpRequest
from ipware import get_client_ip


def get_safe_client_ip(request: HttpRequest) -> str:
    """Get the client IP, falling back to '127.0.0.1' when it cannot be determined."""
    trusted_proxies = getattr(settings, "IPWARE_TRUSTED_PROXY_LIST", [])
    if trusted_proxies:
        client_ip, _routable = get_client_ip(request, proxy_trusted_ips=trusted_proxies)
    else:
        client_ip = request.META.get("REMOTE_ADDR")
    return client_ip or "127.0.0.1"
