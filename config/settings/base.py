"""
Django settings for the Optician Marketplace - Base Configuration.
"""

import os
from pathlib import Path
from typing import Any

# ===============================================================================
# CORE DJANGO SETTINGS
# ===============================================================================

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Application definition
DJANGO_APPS: list[str] = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS: list[str] = [
    "rest_framework",
    "rest_framework.authtoken",  # 🔐 Token authentication for API access
    "ipware",
    "django_q",  # Async task processing
]

LOCAL_APPS: list[str] = [
    "apps.common",
    "apps.users",
    "apps.settings",  # ⚙️ System configuration management
    "apps.opticians",
    "apps.products",
    "apps.loyalty",  # 🎁 Points redemption program
    "apps.orders",
    "apps.notifications",
    "apps.api",  # 🚀 Centralized API endpoints
]

INSTALLED_APPS: list[str] = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE: list[str] = [
    "apps.common.middleware.RequestIDMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ===============================================================================
# DATABASE CONFIGURATION
# ===============================================================================

DATABASES: dict[str, dict[str, Any]] = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.environ.get("DB_NAME", "marketplace"),
        "USER": os.environ.get("DB_USER", "marketplace"),
        "PASSWORD": os.environ.get("DB_PASSWORD", "development_password"),
        "HOST": os.environ.get("DB_HOST", "localhost"),
        "PORT": os.environ.get("DB_PORT", "5432"),
        "CONN_MAX_AGE": 60,  # Database connection pooling
        "OPTIONS": {
            "application_name": "optician_marketplace",
        },
    }
}

# ===============================================================================
# AUTHENTICATION & AUTHORIZATION
# ===============================================================================

AUTH_USER_MODEL = "users.User"

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {
            "min_length": 10,
        },
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
]

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.Argon2PasswordHasher",
    "django.contrib.auth.hashers.PBKDF2PasswordHasher",
]

# ===============================================================================
# INTERNATIONALIZATION & LOCALIZATION
# ===============================================================================

LANGUAGE_CODE = "fr"
TIME_ZONE = "Africa/Casablanca"
USE_I18N = True
USE_TZ = True

# ===============================================================================
# STATIC FILES & MEDIA
# ===============================================================================

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

# ===============================================================================
# CACHE CONFIGURATION 💾
# ===============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.db.DatabaseCache",
        "LOCATION": "django_cache_table",
        "KEY_PREFIX": "marketplace",
        "TIMEOUT": 300,  # 5 minutes default timeout
    }
}

# ===============================================================================
# SESSION & COOKIE SETTINGS
# ===============================================================================

SESSION_ENGINE = "django.contrib.sessions.backends.db"
SESSION_COOKIE_AGE = 86400  # 24 hours
SESSION_COOKIE_HTTPONLY = True
CSRF_COOKIE_HTTPONLY = True

SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# ===============================================================================
# EMAIL CONFIGURATION 📧
# ===============================================================================

EMAIL_USE_TLS = True
EMAIL_HOST = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.environ.get("EMAIL_PORT", "587"))
EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
EMAIL_TIMEOUT = int(os.environ.get("EMAIL_TIMEOUT", "30"))

DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "Optician Marketplace <noreply@opticien-marketplace.ma>")
ADMIN_NOTIFICATION_EMAIL = os.environ.get("ADMIN_NOTIFICATION_EMAIL", "admin@opticien-marketplace.ma")

# Campaign emails are sent in small batches to stay under SMTP provider limits
EMAIL_CAMPAIGN_BATCH_SIZE = int(os.environ.get("EMAIL_CAMPAIGN_BATCH_SIZE", "10"))

# ===============================================================================
# DJANGO REST FRAMEWORK
# ===============================================================================

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.TokenAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": "100/hour",
        "user": "1000/hour",
        "redeem": "10/min",  # Redemption requests
        "order_create": "10/min",  # Order submission
        "nearest": "60/min",  # Public optician search
        "campaign": "5/hour",  # Admin broadcasts
    },
}

# ===============================================================================
# MARKETPLACE BUSINESS CONFIGURATION
# ===============================================================================

DEFAULT_CURRENCY = "EUR"

# ===============================================================================
# EXTERNAL INTEGRATIONS
# ===============================================================================

EXTERNAL_HTTP_TIMEOUT = int(os.environ.get("EXTERNAL_HTTP_TIMEOUT", "10"))

# Geocoding (Nominatim / OpenStreetMap)
GEOCODING_BASE_URL = os.environ.get("GEOCODING_BASE_URL", "https://nominatim.openstreetmap.org/search")
GEOCODING_USER_AGENT = os.environ.get("GEOCODING_USER_AGENT", "OpticienMarketplace/1.0")
GEOCODING_DEFAULT_COUNTRY = os.environ.get("GEOCODING_DEFAULT_COUNTRY", "Morocco")
# Nominatim usage policy allows at most one request per second
GEOCODING_BATCH_DELAY_SECONDS = float(os.environ.get("GEOCODING_BATCH_DELAY_SECONDS", "1.0"))

# WhatsApp Cloud API
WHATSAPP_ACCESS_TOKEN = os.environ.get("WHATSAPP_ACCESS_TOKEN", "")
WHATSAPP_PHONE_NUMBER_ID = os.environ.get("WHATSAPP_PHONE_NUMBER_ID", "")
WHATSAPP_API_VERSION = os.environ.get("WHATSAPP_API_VERSION", "v20.0")
ADMIN_WHATSAPP_NUMBER = os.environ.get("ADMIN_WHATSAPP_NUMBER", "")

# ===============================================================================
# SECURE IP DETECTION CONFIGURATION 🔒
# ===============================================================================

IPWARE_TRUSTED_PROXY_LIST: list[str] = []

# ===============================================================================
# SECURITY KEYS
# ===============================================================================

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "🚨 SECURITY WARNING: Using default SECRET_KEY. Set DJANGO_SECRET_KEY environment variable for production!",
        UserWarning,
        stacklevel=2,
    )
    SECRET_KEY = "django-insecure-dev-key-only-change-in-production-or-tests"  # noqa: S105


def validate_production_secret_key() -> None:
    """Validate SECRET_KEY meets production security requirements"""
    if SECRET_KEY and SECRET_KEY.startswith("django-insecure-"):
        raise ValueError(
            "🔥 CRITICAL SECURITY ERROR: Cannot use insecure SECRET_KEY in production! "
            "Generate a secure key: python -c 'from django.core.management.utils import get_random_secret_key; print(get_random_secret_key())'"
        )


# ===============================================================================
# DJANGO-Q2 TASK QUEUE 🚀
# ===============================================================================

Q_CLUSTER_BASE = {
    "name": "marketplace-cluster",
    "timeout": 120,
    "retry": 300,
    "save_limit": 1000,  # Keep last 1000 task results
    "catch_up": False,  # Don't run missed scheduled tasks
    "orm": "default",
    "queue_limit": 100,
}

Q_CLUSTER = {
    **Q_CLUSTER_BASE,
    "workers": 2,
    "recycle": 500,
    "sync": False,
}
