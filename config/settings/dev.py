"""
Development settings for the Optician Marketplace
Fast iteration with debugging enabled.
"""

import os

from .base import *  # noqa: F403

# ===============================================================================
# DEVELOPMENT FLAGS
# ===============================================================================

DEBUG = True
ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0"]  # noqa: S104

# ===============================================================================
# DATABASE FOR DEVELOPMENT (SQLite for speed)
# ===============================================================================

if os.environ.get("USE_POSTGRES") != "true":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": str(BASE_DIR / "db.sqlite3"),  # noqa: F405
        }
    }

# ===============================================================================
# CACHE & EMAIL
# ===============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "marketplace-dev",
    }
}

EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# ===============================================================================
# TASK QUEUE (run tasks inline unless a cluster is started)
# ===============================================================================

Q_CLUSTER = {
    **Q_CLUSTER_BASE,  # noqa: F405
    "workers": 1,
    "sync": os.environ.get("Q_CLUSTER_SYNC", "true").lower() == "true",
}

# ===============================================================================
# LOGGING CONFIGURATION 📝
# ===============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "apps": {
            "handlers": ["console"],
            "level": "DEBUG",
            "propagate": False,
        },
    },
}
