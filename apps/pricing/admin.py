from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import BulkRate, RoomRate


@admin.register(RoomRate)
class RoomRateAdmin(admin.ModelAdmin):
    list_display = ("guest_tier", "room_size", "empty_price", "adult_price", "child_price", "updated_at")
    list_filter = ("guest_tier", "room_size")


@admin.register(BulkRate)
class BulkRateAdmin(admin.ModelAdmin):
    list_display = (
        "base_price",
        "resident_adult_price",
        "resident_child_price",
        "external_adult_price",
        "external_child_price",
        "updated_at",
    )
