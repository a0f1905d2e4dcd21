"""Serializers for holds, bookings and availability queries."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.pricing.serializers import BookingShapeSerializer
from apps.pricing.services import display_price, make_booking_request
from shared.domain.base import BookingValidationError

from .models import Booking, BookingGuest, BookingRoom, ProposedBooking


class HoldSerializer(serializers.ModelSerializer):
    rooms = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = ProposedBooking
        fields = [
            "proposal_id",
            "start_date",
            "end_date",
            "rooms",
            "guest_tier",
            "is_bulk",
            "adults",
            "children",
            "toddlers",
            "total_price",
            "created_at",
            "expires_at",
        ]
        read_only_fields = fields


class ContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32, allow_blank=True, default="")
    notes = serializers.CharField(allow_blank=True, default="")


class BookingCommitSerializer(BookingShapeSerializer, ContactSerializer):
    """Final booking shape plus contact details and the holds it replaces."""

    proposal_ids = serializers.ListField(
        child=serializers.CharField(max_length=20),
        default=list,
    )


class BookingUpdateSerializer(BookingShapeSerializer, ContactSerializer):
    pass


class BookingRoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingRoom
        fields = ["room", "start_date", "end_date", "adults", "children", "toddlers"]
        read_only_fields = fields


class BookingGuestSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingGuest
        fields = ["name", "person_type", "price_tier", "room"]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    rooms = BookingRoomSerializer(source="room_stays", many=True, read_only=True)
    guests = BookingGuestSerializer(many=True, read_only=True)
    current_price = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "code",
            "start_date",
            "end_date",
            "guest_tier",
            "is_bulk",
            "rooms",
            "guests",
            "adults",
            "children",
            "toddlers",
            "name",
            "email",
            "phone",
            "notes",
            "total_price",
            "current_price",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_current_price(self, obj: Booking) -> int:
        """Price under today's tables; the stored price when they are unusable."""
        try:
            request = make_booking_request(obj.as_shape_data())
        except BookingValidationError:
            return obj.total_price
        return display_price(request, obj.total_price)


class BookingCreatedSerializer(BookingSerializer):
    """Returned once, right after commit: the only response carrying the edit token."""

    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ["edit_token"]
        read_only_fields = fields


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    room = serializers.CharField(max_length=10)


class CalendarQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()
    rooms = serializers.CharField(required=False, allow_blank=True)

    def validate_rooms(self, value: str) -> list[str]:
        return [room.strip() for room in value.split(",") if room.strip()]
