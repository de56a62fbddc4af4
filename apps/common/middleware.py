"""
Common middleware for the Optician Marketplace
Request tracing for logs and API responses.
"""

import logging
import re
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9\-]{8,64}$")

# ===============================================================================
# REQUEST ID MIDDLEWARE
# ===============================================================================


class RequestIDMiddleware:
    """Add unique request ID for tracing and audit logs"""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Reuse a well-formed upstream ID so proxies and app logs correlate
        inbound = request.META.get("HTTP_X_REQUEST_ID", "")
        request_id = inbound if _REQUEST_ID_PATTERN.match(inbound) else str(uuid.uuid4())
        request.META["REQUEST_ID"] = request_id
        request.request_id = request_id  # type: ignore[attr-defined]

        response = self.get_response(request)
        response[REQUEST_ID_HEADER] = request_id

        return response
