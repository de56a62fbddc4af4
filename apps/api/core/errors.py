# ===============================================================================
# SERVICE ERROR → HTTP RESPONSE MAPPING 🚨
# ===============================================================================

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response

from apps.common.types import ErrorCode, ServiceError

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.UNEXPECTED_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def service_error_response(error: ServiceError) -> Response:
    """Business rule failures are 400 unless the code maps to something narrower"""
    http_status = ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST)
    if http_status >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"🔥 [API] {error.code}: {error.message}")
        return Response({"error": error.message, "code": error.code}, status=http_status)
    return Response({"error": error.message, "code": error.code, "details": error.details}, status=http_status)


def invalid_input_response(errors: dict) -> Response:
    return Response(
        {"error": "Invalid input", "code": ErrorCode.VALIDATION_ERROR, "details": errors},
        status=status.HTTP_400_BAD_REQUEST,
    )
