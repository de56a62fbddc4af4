"""
Input validation and security event logging for the Optician Marketplace.
"""

import logging
import re
from typing import Any

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger(__name__)

# ===============================================================================
# SECURITY CONSTANTS
# ===============================================================================

# Input size limits (DoS prevention)
MAX_NOTE_LENGTH = 1000
MAX_REASON_LENGTH = 500
MAX_SUBJECT_LENGTH = 200
MAX_MESSAGE_LENGTH = 4096  # WhatsApp text body limit
MAX_ITEMS_PER_REQUEST = 100

# Patterns that never belong in free-text business fields
MALICIOUS_PATTERNS = [
    r"<script[^>]*>",
    r"javascript:",
    r"on\w+\s*=",
    r"<iframe[^>]*>",
]

# ===============================================================================
# INPUT VALIDATION
# ===============================================================================


class SecureInputValidator:
    """Free-text validation with security focus"""

    @staticmethod
    def validate_text(value: str | None, max_length: int, required: bool = False) -> str:
        """🔒 Validate a free-text field (note, reason, campaign content)"""
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValidationError(_("Invalid input format"))

        value = value.strip()
        if required and not value:
            raise ValidationError(_("Required field cannot be empty"))
        if len(value) > max_length:
            raise ValidationError(_("Input too long"))

        SecureInputValidator._check_malicious_patterns(value)
        return value

    @staticmethod
    def _check_malicious_patterns(value: str) -> None:
        for pattern in MALICIOUS_PATTERNS:
            if re.search(pattern, value, re.IGNORECASE):
                logger.warning(f"🚨 [Security] Malicious pattern rejected: {pattern}")
                raise ValidationError(_("Invalid characters detected"))


# ===============================================================================
# AUDIT LOGGING INTEGRATION
# ===============================================================================


def log_security_event(event_type: str, details: dict[str, Any], request_ip: str | None = None) -> None:
    """
    Log security events for monitoring and forensics
    """
    logger.warning(f"🚨 [Security] {event_type}: {details} from IP: {request_ip}")
