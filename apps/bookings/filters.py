"""FilterSet definitions for the admin booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Bookings with at least one night in [start, end) and/or on a room."""

    start = django_filters.DateFilter(field_name="end_date", lookup_expr="gt")
    end = django_filters.DateFilter(field_name="start_date", lookup_expr="lt")
    room = django_filters.CharFilter(field_name="room_stays__room", distinct=True)
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    is_bulk = django_filters.BooleanFilter()

    class Meta:
        model = Booking
        fields = ["start", "end", "room", "email", "is_bulk"]
