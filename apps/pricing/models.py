"""Stored price tables for the chalet."""

from __future__ import annotations

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class GuestTier(models.TextChoices):
    RESIDENT = "resident", _("Resident")
    EXTERNAL = "external", _("External guest")


class RoomRate(models.Model):
    """Nightly rate card for one guest tier and room size."""

    class RoomSize(models.TextChoices):
        SMALL = "small", _("Small room")
        LARGE = "large", _("Large room")

    guest_tier = models.CharField(max_length=10, choices=GuestTier.choices)
    room_size = models.CharField(max_length=10, choices=RoomSize.choices)
    empty_price = models.PositiveIntegerField(
        help_text=_("Nightly price of the room without guests."),
    )
    adult_price = models.PositiveIntegerField(validators=[MinValueValidator(0)])
    child_price = models.PositiveIntegerField(validators=[MinValueValidator(0)])
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room rate")
        verbose_name_plural = _("Room rates")
        ordering = ["guest_tier", "room_size"]
        constraints = [
            models.UniqueConstraint(
                fields=["guest_tier", "room_size"],
                name="room_rate_unique_tier_size",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.guest_tier}/{self.room_size}: {self.empty_price} + {self.adult_price}/{self.child_price}"


class BulkRate(models.Model):
    """Whole-chalet price table. A single row."""

    base_price = models.PositiveIntegerField()
    resident_adult_price = models.PositiveIntegerField()
    resident_child_price = models.PositiveIntegerField()
    external_adult_price = models.PositiveIntegerField()
    external_child_price = models.PositiveIntegerField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Bulk rate")
        verbose_name_plural = _("Bulk rates")

    def __str__(self) -> str:
        return f"Bulk: {self.base_price}"
