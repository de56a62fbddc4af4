"""
Campaign API Views for the Optician Marketplace
"""

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api.core import CampaignThrottle, IsAdminRole, invalid_input_response, service_error_response
from apps.notifications.services import CampaignService

from .serializers import EmailCampaignInputSerializer, WhatsAppCampaignInputSerializer


@api_view(["POST"])
@permission_classes([IsAdminRole])
@throttle_classes([CampaignThrottle])
def email_campaign(request: Request) -> Response:
    """📣 Email broadcast to the selected opticians, or every approved one"""
    input_serializer = EmailCampaignInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    validated = input_serializer.validated_data
    result = CampaignService.send_email_campaign(
        validated["subject"], validated["content"], request.user, validated.get("recipient_ids")
    )
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(result.unwrap().as_dict())


@api_view(["POST"])
@permission_classes([IsAdminRole])
@throttle_classes([CampaignThrottle])
def whatsapp_campaign(request: Request) -> Response:
    input_serializer = WhatsAppCampaignInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    validated = input_serializer.validated_data
    result = CampaignService.send_whatsapp_campaign(validated["message"], request.user, validated.get("recipient_ids"))
    if result.is_err():
        return service_error_response(result.unwrap_err())
    return Response(result.unwrap().as_dict())
