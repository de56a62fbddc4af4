"""
Production settings for the Optician Marketplace
Security-first configuration.
"""

import os

from .base import *  # noqa: F403

# ===============================================================================
# PRODUCTION SECURITY VALIDATION
# ===============================================================================

validate_production_secret_key()  # noqa: F405

# ===============================================================================
# PRODUCTION FLAGS
# ===============================================================================

DEBUG = False
ALLOWED_HOSTS = [host.strip() for host in os.environ.get("ALLOWED_HOSTS", "").split(",") if host.strip()]
CSRF_TRUSTED_ORIGINS = [f"https://{host}" for host in ALLOWED_HOSTS]

# ===============================================================================
# HTTPS ENFORCEMENT & SSL SETTINGS
# ===============================================================================

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SAMESITE = "Lax"

SECURE_HSTS_SECONDS = int(os.environ.get("SECURE_HSTS_SECONDS", "31536000"))
SECURE_HSTS_INCLUDE_SUBDOMAINS = True

# Only trust X-Forwarded-For from the load balancer
IPWARE_TRUSTED_PROXY_LIST = [
    proxy.strip() for proxy in os.environ.get("IPWARE_TRUSTED_PROXY_LIST", "").split(",") if proxy.strip()
]

# ===============================================================================
# PRODUCTION LOGGING 📝
# ===============================================================================

LOG_DIR = os.environ.get("LOG_DIR", "/var/log/marketplace")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {process:d} {thread:d} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": os.path.join(LOG_DIR, "marketplace.log"),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console", "file"],
        "level": "INFO",
    },
    "loggers": {
        "django.security": {
            "handlers": ["console", "file"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
