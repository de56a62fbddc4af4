"""
Optician API Views for the Optician Marketplace
Public proximity search plus account and balance administration.
"""

import logging
from uuid import UUID

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api.core import (
    IsAdminRole,
    IsOpticianRole,
    NearestSearchThrottle,
    StandardResultsSetPagination,
    get_request_optician,
    invalid_input_response,
    service_error_response,
)
from apps.opticians.geocoding import GeocodingService
from apps.opticians.services import LoyaltyPointsService, OpticianService

from .serializers import (
    NearbyOpticianSerializer,
    NearestQuerySerializer,
    OpticianRegisterInputSerializer,
    OpticianSerializer,
    OpticianStatusInputSerializer,
    PointsAdjustInputSerializer,
    PointsTransactionSerializer,
)

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([AllowAny])
@throttle_classes([NearestSearchThrottle])
def nearest_opticians(request: Request) -> Response:
    """📍 Approved opticians nearest to `?lat=&lng=`, optionally within `?city=`"""
    query = NearestQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return invalid_input_response(query.errors)

    params = query.validated_data
    ranked = OpticianService.nearest(params["lat"], params["lng"], params.get("limit"), params.get("city") or None)
    opticians = [optician for optician, _ in ranked]
    distances = {optician.pk: distance for optician, distance in ranked}

    serializer = NearbyOpticianSerializer(opticians, many=True, context={"distances": distances})
    return Response({"results": serializer.data, "count": len(serializer.data)})


@api_view(["PATCH"])
@permission_classes([IsAdminRole])
def update_status(request: Request, optician_id: UUID) -> Response:
    input_serializer = OpticianStatusInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    result = OpticianService.set_status(optician_id, input_serializer.validated_data["status"], request.user.email)
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(OpticianSerializer(result.unwrap()).data)


@api_view(["PATCH"])
@permission_classes([IsAdminRole])
def adjust_points(request: Request, optician_id: UUID) -> Response:
    """💎 Add or remove points; the balance can never go negative"""
    input_serializer = PointsAdjustInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    validated = input_serializer.validated_data
    result = LoyaltyPointsService.adjust(optician_id, validated["points"], request.user.email, validated.get("reason", ""))
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(OpticianSerializer(result.unwrap()).data)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def geocode_opticians(request: Request) -> Response:
    """🗺️ Resolve coordinates for every optician that has an address but none yet"""
    summary = GeocodingService.geocode_missing()
    logger.info(f"🗺️ [Opticians API] Batch geocode by {request.user.email}: {summary}")
    return Response(summary)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def register_optician(request: Request) -> Response:
    """🏪 Create the caller's business profile; it stays PENDING until an admin approves it"""
    input_serializer = OpticianRegisterInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    result = OpticianService.register(request.user, dict(input_serializer.validated_data))
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(OpticianSerializer(result.unwrap()).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsOpticianRole])
def my_points(request: Request) -> Response:
    """💎 Own balance with the movements behind it, newest first"""
    optician = get_request_optician(request)
    optician.refresh_from_db(fields=["loyalty_points"])
    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(LoyaltyPointsService.history(optician), request)
    response = paginator.get_paginated_response(PointsTransactionSerializer(page, many=True).data)
    response.data["balance"] = optician.loyalty_points
    return response
