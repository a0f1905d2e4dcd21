"""Admin registrations for rooms and blockages."""

from __future__ import annotations

from django.contrib import admin

from .models import Blockage, Room


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "size", "beds", "sort_order")
    list_filter = ("size",)
    ordering = ("sort_order", "id")


@admin.register(Blockage)
class BlockageAdmin(admin.ModelAdmin):
    list_display = ("id", "start_date", "end_date", "reason", "created_at")
    list_filter = ("start_date",)
    search_fields = ("id", "reason")
    filter_horizontal = ("rooms",)
    readonly_fields = ("id", "created_at")
