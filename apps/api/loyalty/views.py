"""
Loyalty API Views for the Optician Marketplace
Reward catalog, redemption requests and admin review.
"""

import logging
from uuid import UUID

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api.core import (
    IsAdminRole,
    IsOpticianRole,
    RedeemThrottle,
    StandardResultsSetPagination,
    get_request_optician,
    invalid_input_response,
    service_error_response,
)
from apps.loyalty.services import RedemptionService

from .serializers import (
    LoyaltyProductSerializer,
    RedeemInputSerializer,
    RedemptionItemActionSerializer,
    RedemptionSerializer,
    RejectInputSerializer,
)

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def reward_list(request: Request) -> Response:
    """Active rewards opticians can redeem points for"""
    serializer = LoyaltyProductSerializer(RedemptionService.available_rewards(), many=True)
    return Response({"results": serializer.data, "count": len(serializer.data)})


@api_view(["POST"])
@permission_classes([IsOpticianRole])
@throttle_classes([RedeemThrottle])
def redeem(request: Request) -> Response:
    """🎁 Request a redemption; points are only debited on approval"""
    input_serializer = RedeemInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    validated = input_serializer.validated_data
    optician = get_request_optician(request)
    result = RedemptionService.create_redemption(
        optician,
        [dict(item) for item in validated["items"]],
        claimed_total=validated.get("total_points"),
    )
    if result.is_err():
        return service_error_response(result.unwrap_err())

    return Response(RedemptionSerializer(result.unwrap()).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def redemption_list(request: Request) -> Response:
    """Admins see every redemption (optionally `?status=`), opticians their own"""
    if request.user.is_admin_role:
        queryset = RedemptionService.list_redemptions(request.query_params.get("status"))
    else:
        optician = get_request_optician(request)
        if optician is None:
            return Response({"error": "Optician account required"}, status=status.HTTP_403_FORBIDDEN)
        queryset = RedemptionService.list_for_optician(optician)

    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(RedemptionSerializer(page, many=True).data)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def approve_redemption(request: Request, redemption_id: UUID) -> Response:
    result = RedemptionService.approve_redemption(redemption_id, request.user.email)
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(RedemptionSerializer(result.unwrap()).data)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def reject_redemption(request: Request, redemption_id: UUID) -> Response:
    input_serializer = RejectInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    result = RedemptionService.reject_redemption(
        redemption_id, request.user.email, input_serializer.validated_data.get("reason")
    )
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(RedemptionSerializer(result.unwrap()).data)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def confirm_redemption_item(request: Request, item_id: UUID) -> Response:
    """Approve or reject the redemption an item belongs to"""
    input_serializer = RedemptionItemActionSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    validated = input_serializer.validated_data
    if validated["action"] == RedemptionItemActionSerializer.ACTION_APPROVE:
        result = RedemptionService.approve_item(item_id, request.user.email)
    else:
        result = RedemptionService.reject_item(item_id, request.user.email, validated.get("reason"))

    if result.is_err():
        return service_error_response(result.unwrap_err())

    logger.info(f"✅ [Loyalty API] Item {item_id} {validated['action']} by {request.user.email}")
    return Response(RedemptionSerializer(result.unwrap()).data)
