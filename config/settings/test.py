"""
Test settings for the Optician Marketplace
Fast, isolated testing environment.
"""

from .base import *  # noqa: F403

# ===============================================================================
# TEST FLAGS
# ===============================================================================

DEBUG = False

# ===============================================================================
# TEST DATABASE (In-memory for speed)
# ===============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# ===============================================================================
# TEST CACHE
# ===============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-cache",
    }
}

# ===============================================================================
# TEST EMAIL BACKEND
# ===============================================================================

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# ===============================================================================
# DISABLE MIGRATIONS FOR FASTER TESTS
# ===============================================================================


class DisableMigrations:
    def __contains__(self, item: str) -> bool:
        return True

    def __getitem__(self, item: str) -> None:
        return None


MIGRATION_MODULES = DisableMigrations()

# ===============================================================================
# PASSWORD HASHER (Fast for tests)
# ===============================================================================

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",  # Fast but insecure (test only)
]

# ===============================================================================
# LOGGING (Minimal for tests)
# ===============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "handlers": ["null"],
        "level": "CRITICAL",
    },
}

# ===============================================================================
# SECURITY (Relaxed for tests)
# ===============================================================================

SECRET_KEY = "django-test-key-not-secure"  # noqa: S105
ALLOWED_HOSTS = ["testserver", "localhost", "127.0.0.1"]

TESTING = True

# Disable DRF throttling in tests to prevent 429s from rapid API calls
REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_CLASSES": [],
    "DEFAULT_THROTTLE_RATES": {
        scope: "10000/min" for scope in REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]  # noqa: F405
    },
}

# ===============================================================================
# EXTERNAL SERVICES (Disabled in tests)
# ===============================================================================

WHATSAPP_ACCESS_TOKEN = ""
WHATSAPP_PHONE_NUMBER_ID = ""
ADMIN_WHATSAPP_NUMBER = ""
GEOCODING_BATCH_DELAY_SECONDS = 0.0

# ===============================================================================
# TASK QUEUE (Synchronous for tests)
# ===============================================================================

Q_CLUSTER = {
    **Q_CLUSTER_BASE,  # noqa: F405
    "workers": 1,
    "sync": True,
}
