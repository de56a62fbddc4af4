"""
System Settings models for the Optician Marketplace
Runtime-tunable business values with type validation.
"""

from __future__ import annotations

import decimal
from decimal import Decimal
from typing import Any, ClassVar, cast

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

SettingValue = str | int | bool | Decimal | list[Any] | dict[str, Any] | None


class SystemSetting(models.Model):
    """⚙️ System setting with type validation and caching support"""

    DATA_TYPE_CHOICES: ClassVar[list[tuple[str, str]]] = [
        ("string", cast(str, _("String"))),
        ("integer", cast(str, _("Integer"))),
        ("boolean", cast(str, _("Boolean"))),
        ("decimal", cast(str, _("Decimal"))),
        ("list", cast(str, _("List"))),
        ("json", cast(str, _("JSON"))),
    ]

    key = models.CharField(
        _("Key"),
        max_length=100,
        unique=True,
        help_text=_('Unique setting identifier (e.g., "loyalty.registration_bonus_points")'),
    )
    name = models.CharField(_("Name"), max_length=200, blank=True, help_text=_("Human-readable setting name"))
    description = models.TextField(_("Description"), blank=True)
    data_type = models.CharField(
        _("Data Type"),
        max_length=20,
        choices=DATA_TYPE_CHOICES,
        default="string",
        help_text=_("Type of data this setting stores"),
    )
    value = models.JSONField(_("Value"), null=True, help_text=_("Current setting value"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "system_settings"
        verbose_name = _("System Setting")
        verbose_name_plural = _("System Settings")
        ordering: ClassVar = ["key"]

    def __str__(self) -> str:
        return f"⚙️ {self.key}: {self.value}"

    def clean(self) -> None:
        super().clean()
        if self.key and "." not in self.key:
            raise ValidationError({"key": _('Setting key must be in format "category.setting_name"')})
        self._validate_value(self.value)

    def _validate_value(self, value: Any) -> None:
        """Validate value against data type"""
        if value is None:
            return

        try:
            if self.data_type == "string" and not isinstance(value, str):
                raise ValidationError({"value": _("Value must be a string")})
            if self.data_type == "integer" and not isinstance(value, int):
                int(value)
            elif self.data_type == "boolean" and not isinstance(value, bool):
                raise ValidationError({"value": _("Value must be a boolean")})
            elif self.data_type == "decimal":
                Decimal(str(value))
            elif self.data_type == "list" and not isinstance(value, list):
                raise ValidationError({"value": _("Value must be a list")})
        except (ValueError, TypeError, decimal.InvalidOperation) as e:
            raise ValidationError(
                {"value": _('Invalid value for data type "%(type)s": %(error)s') % {"type": self.data_type, "error": str(e)}}
            ) from e

    def get_typed_value(self) -> SettingValue:
        """Get the setting value converted to its proper Python type"""
        if self.data_type == "decimal" and self.value is not None:
            return Decimal(str(self.value))
        return cast(SettingValue, self.value)
