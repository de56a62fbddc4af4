"""
Product API Views for the Optician Marketplace
Catalog browsing for opticians and stock edits for admins.
"""

from uuid import UUID

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api.core import IsAdminRole, StandardResultsSetPagination, invalid_input_response, service_error_response
from apps.products.services import ProductCatalogService, ProductStockService

from .serializers import ProductSerializer, ProductStockSerializer, StockUpdateInputSerializer


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def product_list(request: Request) -> Response:
    """🛍️ Active catalog, paginated"""
    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(ProductCatalogService.list_active(), request)
    return paginator.get_paginated_response(ProductSerializer(page, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def product_detail(request: Request, product_id: UUID) -> Response:
    result = ProductCatalogService.get_active(product_id)
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(ProductSerializer(result.unwrap()).data)


@api_view(["PATCH"])
@permission_classes([IsAdminRole])
def update_stock(request: Request, product_id: UUID) -> Response:
    """📦 Set a product's stock; availability follows the quantity"""
    input_serializer = StockUpdateInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    result = ProductStockService.set_stock(product_id, input_serializer.validated_data["stock_qty"], request.user.email)
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(ProductStockSerializer(result.unwrap()).data)
