"""
System Settings service layer for the Optician Marketplace
Centralized configuration management with caching and type safety.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, ClassVar

from django.core.cache import cache

from .models import SettingValue, SystemSetting

logger = logging.getLogger(__name__)


class SettingsService:
    """⚙️ Centralized settings management with caching"""

    CACHE_PREFIX: ClassVar[str] = "marketplace_setting"
    CACHE_TIMEOUT: ClassVar[int] = 3600  # 1 hour

    DEFAULT_SETTINGS: ClassVar[dict[str, Any]] = {
        "loyalty.registration_bonus_points": 0,
        "opticians.nearest_default_limit": 10,
    }

    @classmethod
    def _get_cache_key(cls, key: str) -> str:
        return f"{cls.CACHE_PREFIX}:{key}"

    @classmethod
    def get_setting(cls, key: str, default: Any = None) -> SettingValue:
        """
        🔍 Get setting value with caching

        Args:
            key: Setting key (e.g., 'loyalty.registration_bonus_points')
            default: Default value if setting not found

        Returns:
            Setting value or default
        """
        cache_key = cls._get_cache_key(key)
        cached_value = cache.get(cache_key)
        if cached_value is not None:
            logger.debug("✅ [Settings] Cache hit for key: %s", key)
            return cached_value  # type: ignore[no-any-return]

        try:
            setting = SystemSetting.objects.get(key=key)
        except SystemSetting.DoesNotExist:
            fallback_value = cls.DEFAULT_SETTINGS.get(key, default)
            logger.debug("⚠️ [Settings] Using default for missing key: %s", key)
            return fallback_value  # type: ignore[no-any-return]

        value = setting.get_typed_value()
        if value is not None:
            cache.set(cache_key, value, timeout=cls.CACHE_TIMEOUT)
        logger.debug("⚡ [Settings] Database hit for key: %s", key)
        return value

    @classmethod
    def set_setting(cls, key: str, value: Any, data_type: str | None = None) -> SystemSetting:
        """🔧 Create or update a setting and invalidate its cache entry"""
        if isinstance(value, Decimal):
            value = str(value)
        setting, _created = SystemSetting.objects.update_or_create(
            key=key,
            defaults={"value": value, "data_type": data_type or cls._infer_data_type(value)},
        )
        cache.delete(cls._get_cache_key(key))
        logger.info("⚡ [Settings] Updated %s = %s", key, value)
        return setting

    @classmethod
    def get_integer_setting(cls, key: str, default: int = 0) -> int:
        """🔢 Get integer setting with type safety"""
        value = cls.get_setting(key, default)
        try:
            return int(value)  # type: ignore[arg-type]
        except (ValueError, TypeError):
            logger.warning("⚠️ [Settings] Invalid integer value for %s: %s", key, value)
            return default

    @classmethod
    def _infer_data_type(cls, value: Any) -> str:
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, int):
            return "integer"
        if isinstance(value, list):
            return "list"
        if isinstance(value, dict):
            return "json"
        return "string"
