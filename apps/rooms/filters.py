"""FilterSet definitions for blockage listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Blockage


class BlockageFilterSet(django_filters.FilterSet):
    """Blockages overlapping [start, end) and/or affecting a room."""

    start = django_filters.DateFilter(field_name="end_date", lookup_expr="gt")
    end = django_filters.DateFilter(field_name="start_date", lookup_expr="lt")
    room = django_filters.CharFilter(method="filter_room")

    class Meta:
        model = Blockage
        fields = ["start", "end", "room"]

    def filter_room(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        # A blockage without rooms applies to every room
        return queryset.filter(Q(rooms__id=value) | Q(rooms__isnull=True)).distinct()
