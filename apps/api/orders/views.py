"""
Order API Views for the Optician Marketplace
Order submission by opticians, per-line review and manual orders by admins.
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
    OrderCreateThrottle,
    StandardResultsSetPagination,
    get_request_optician,
    invalid_input_response,
    service_error_response,
)
from apps.orders.services import OrderService

from .serializers import (
    ManualOrderInputSerializer,
    OrderCreateInputSerializer,
    OrderItemActionSerializer,
    OrderItemSerializer,
    OrderSerializer,
)

logger = logging.getLogger(__name__)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@throttle_classes([OrderCreateThrottle])
def order_list(request: Request) -> Response:
    """
    GET: admins see every order (optionally `?status=`), opticians their own.
    POST: an optician submits a new order for review.
    """
    if request.method == "POST":
        return _submit_order(request)

    if request.user.is_admin_role:
        queryset = OrderService.list_orders(request.query_params.get("status"))
    else:
        optician = get_request_optician(request)
        if optician is None:
            return Response({"error": "Optician account required"}, status=status.HTTP_403_FORBIDDEN)
        queryset = OrderService.list_for_optician(optician)

    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(OrderSerializer(page, many=True).data)


def _submit_order(request: Request) -> Response:
    optician = get_request_optician(request)
    if optician is None or not request.user.is_optician_role:
        return Response({"error": "Optician account required"}, status=status.HTTP_403_FORBIDDEN)

    input_serializer = OrderCreateInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    validated = input_serializer.validated_data
    result = OrderService.submit_order(optician, [dict(item) for item in validated["items"]], validated.get("note", ""))
    if result.is_err():
        return service_error_response(result.unwrap_err())

    order = result.unwrap()
    data = OrderSerializer(order).data
    data["whatsapp_link"] = OrderService.admin_whatsapp_link(order)
    return Response(data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def create_manual_order(request: Request) -> Response:
    input_serializer = ManualOrderInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    validated = input_serializer.validated_data
    result = OrderService.create_manual_order(
        validated["optician_id"],
        [dict(item) for item in validated["items"]],
        request.user.email,
        validated.get("note"),
    )
    if result.is_err():
        return service_error_response(result.unwrap_err())

    return Response(OrderSerializer(result.unwrap()).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def confirm_order_item(request: Request, item_id: UUID) -> Response:
    """Confirm (takes stock, awards points) or cancel a single order line"""
    input_serializer = OrderItemActionSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    action = input_serializer.validated_data["action"]
    if action == OrderItemActionSerializer.ACTION_CONFIRM:
        result = OrderService.confirm_item(item_id, request.user.email)
    else:
        result = OrderService.cancel_item(item_id, request.user.email)

    if result.is_err():
        return service_error_response(result.unwrap_err())

    logger.info(f"✅ [Orders API] Item {item_id} {action} by {request.user.email}")
    return Response(OrderItemSerializer(result.unwrap()).data)
