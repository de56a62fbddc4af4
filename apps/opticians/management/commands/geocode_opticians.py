"""
Django management command to backfill optician coordinates
"""

from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand, CommandParser

from apps.opticians.geocoding import GeocodingService


class Command(BaseCommand):
    """🗺️ Geocode every optician with an address but no coordinates"""

    help = "Resolve latitude/longitude for opticians missing coordinates"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--delay",
            type=float,
            default=None,
            help=f"Seconds between lookups (default {settings.GEOCODING_BATCH_DELAY_SECONDS})",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        self.stdout.write("🗺️ Geocoding opticians without coordinates...")
        summary = GeocodingService.geocode_missing(delay_seconds=options.get("delay"))
        self.stdout.write(
            self.style.SUCCESS(
                f"✅ {summary['succeeded']}/{summary['processed']} resolved, {summary['failed']} not found"
            )
        )
