from __future__ import annotations

from django.core.management.base import BaseCommand  # type: ignore

from apps.pricing.services import seed_default_price_tables
from apps.rooms.services import seed_default_rooms


class Command(BaseCommand):
    help = "Creates the chalet rooms and default price tables if they are missing"

    def handle(self, *args, **options):  # type: ignore
        created_rooms = seed_default_rooms()
        created_rates = seed_default_price_tables()
        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {created_rooms} room(s) and {created_rates} price table row(s)."
            )
        )
