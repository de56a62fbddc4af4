"""
Django management command to set up default system settings
Creates all default settings defined in SettingsService.DEFAULT_SETTINGS
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandParser

from apps.settings.models import SystemSetting
from apps.settings.services import SettingsService


class Command(BaseCommand):
    """⚙️ Set up default system settings"""

    help = "Set up default system settings for the marketplace"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--force",
            action="store_true",
            help="Force update existing settings to default values",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        force = options.get("force", False)
        self.stdout.write(self.style.SUCCESS("🚀 Setting up default system settings..."))

        created_count = 0
        updated_count = 0
        skipped_count = 0

        for key, default_value in SettingsService.DEFAULT_SETTINGS.items():
            exists = SystemSetting.objects.filter(key=key).exists()
            if exists and not force:
                skipped_count += 1
                self.stdout.write(f"  ⏭️  Skipped existing: {key} (use --force to update)")
                continue

            setting = SettingsService.set_setting(key, default_value)
            if not setting.name:
                setting.name = key.split(".", 1)[-1].replace("_", " ").capitalize()
                setting.save(update_fields=["name", "updated_at"])

            if exists:
                updated_count += 1
                self.stdout.write(f"  🔄 Updated setting: {key} = {default_value}")
            else:
                created_count += 1
                self.stdout.write(f"  ✅ Created setting: {key} = {default_value}")

        self.stdout.write(
            self.style.SUCCESS(
                f"🎉 Done: {created_count} created, {updated_count} updated, {skipped_count} skipped"
            )
        )
