"""
Async notification tasks for the Optician Marketplace
Executed by Django-Q2 workers after the triggering transaction commits.
"""

import logging
from typing import Any

from apps.opticians.models import Optician

from .services import NotificationService

logger = logging.getLogger(__name__)


def send_admin_alert_task(subject: str, message: str, metadata: dict[str, Any] | None = None) -> bool:
    """🔔 Notify the marketplace admin of a new request"""
    return NotificationService.send_admin_alert(subject, message, metadata)


def send_optician_notification_task(optician_id: str, subject: str, message: str) -> bool:
    """🔔 Tell an optician their request was processed"""
    try:
        optician = Optician.objects.select_related("user").get(pk=optician_id)
    except Optician.DoesNotExist:
        logger.warning(f"⚠️ [Notification] Optician {optician_id} no longer exists")
        return False
    return NotificationService.send_optician_notification(optician, subject, message)
