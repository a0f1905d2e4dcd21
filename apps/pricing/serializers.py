"""Serializers for booking shapes and price tables."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.tables import GuestTier, PersonType

GUEST_TIER_CHOICES = [tier.value for tier in GuestTier]
PERSON_TYPE_CHOICES = [person.value for person in PersonType]


class RoomSelectionSerializer(serializers.Serializer):
    """One room of a booking with optional own dates and guest counts."""

    room = serializers.CharField(max_length=10)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    adults = serializers.IntegerField(min_value=0, required=False)
    children = serializers.IntegerField(min_value=0, required=False)
    toddlers = serializers.IntegerField(min_value=0, required=False)

    def validate(self, attrs):  # type: ignore
        if ("start_date" in attrs) != ("end_date" in attrs):
            raise serializers.ValidationError("Room dates need both start_date and end_date.")
        return attrs


class RosterGuestSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, allow_blank=True, default="")
    person_type = serializers.ChoiceField(choices=PERSON_TYPE_CHOICES)
    price_tier = serializers.ChoiceField(choices=GUEST_TIER_CHOICES, required=False)
    room = serializers.CharField(max_length=10, required=False, allow_null=True)


class BookingShapeSerializer(serializers.Serializer):
    """
    The guest's booking choices, shared by price preview, holds and commits.

    Date ordering is checked by the domain layer so a reversed range comes
    back as ``invalid_date_range`` rather than a generic field error.
    """

    start_date = serializers.DateField()
    end_date = serializers.DateField()
    guest_tier = serializers.ChoiceField(choices=GUEST_TIER_CHOICES, default=GuestTier.EXTERNAL.value)
    is_bulk = serializers.BooleanField(default=False)
    rooms = RoomSelectionSerializer(many=True, default=list)
    adults = serializers.IntegerField(min_value=0, default=0)
    children = serializers.IntegerField(min_value=0, default=0)
    toddlers = serializers.IntegerField(min_value=0, default=0)
    guests = RosterGuestSerializer(many=True, default=list)
    christmas_code = serializers.CharField(max_length=32, allow_blank=True, default="")


class PriceQuoteSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    strategy = serializers.CharField()
