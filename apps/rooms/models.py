"""Room reference data and admin blockages for the chalet."""

from __future__ import annotations

import secrets

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class Room(models.Model):
    """A bookable room. Reference data owned by configuration."""

    class Size(models.TextChoices):
        SMALL = "small", _("Small room")
        LARGE = "large", _("Large room")

    id = models.CharField(max_length=10, primary_key=True)
    name = models.CharField(max_length=100)
    size = models.CharField(max_length=10, choices=Size.choices, default=Size.SMALL)
    beds = models.PositiveSmallIntegerField(default=2)
    sort_order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["sort_order", "id"]

    def __str__(self) -> str:
        return self.name or f"Room {self.id}"


def generate_blockage_id() -> str:
    return f"BLK{secrets.token_hex(5).upper()}"


class Blockage(models.Model):
    """Admin-created exclusion of room-nights. No rooms means the whole chalet."""

    id = models.CharField(
        max_length=20,
        primary_key=True,
        default=generate_blockage_id,
        editable=False,
    )
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("First night that is no longer blocked."))
    rooms = models.ManyToManyField(Room, blank=True, related_name="blockages")
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Blockage")
        verbose_name_plural = _("Blockages")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="blockage_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="blockage_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.id}: {self.start_date} - {self.end_date}"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)
