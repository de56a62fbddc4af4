"""
Campaign API Serializers for the Optician Marketplace
"""

from rest_framework import serializers

from apps.common.validators import MAX_MESSAGE_LENGTH, MAX_SUBJECT_LENGTH
from apps.notifications.services import MAX_CAMPAIGN_CONTENT_LENGTH


class EmailCampaignInputSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=MAX_SUBJECT_LENGTH)
    content = serializers.CharField(max_length=MAX_CAMPAIGN_CONTENT_LENGTH)
    recipient_ids = serializers.ListField(child=serializers.UUIDField(), required=False)


class WhatsAppCampaignInputSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=MAX_MESSAGE_LENGTH)
    recipient_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
