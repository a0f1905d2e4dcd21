"""Admin registration for bookings and holds."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingGuest, BookingRoom, ProposedBooking


class BookingRoomInline(admin.TabularInline):
    model = BookingRoom
    extra = 0
    readonly_fields = ("room", "start_date", "end_date", "adults", "children", "toddlers")
    can_delete = False


class BookingGuestInline(admin.TabularInline):
    model = BookingGuest
    extra = 0
    readonly_fields = ("name", "person_type", "price_tier", "room", "position")
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Read-mostly view: changes to dates or rooms go through the booking API."""

    list_display = (
        "code",
        "name",
        "email",
        "start_date",
        "end_date",
        "guest_tier",
        "is_bulk",
        "total_price",
        "created_at",
    )
    list_filter = ("guest_tier", "is_bulk", "start_date")
    search_fields = ("code", "name", "email", "phone")
    readonly_fields = (
        "code",
        "guest_tier",
        "is_bulk",
        "start_date",
        "end_date",
        "adults",
        "children",
        "toddlers",
        "total_price",
        "edit_token",
        "created_at",
        "updated_at",
    )
    inlines = [BookingRoomInline, BookingGuestInline]


@admin.register(ProposedBooking)
class ProposedBookingAdmin(admin.ModelAdmin):
    list_display = ("proposal_id", "session_id", "start_date", "end_date", "total_price", "expires_at")
    list_filter = ("guest_tier", "is_bulk")
    search_fields = ("proposal_id", "session_id")
    readonly_fields = ("proposal_id", "created_at", "expires_at")
