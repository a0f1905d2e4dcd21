"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AvailabilityView, BookingViewSet, CalendarView, HoldDetailView, HoldListView

router = SimpleRouter()
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = [
    path("availability/", AvailabilityView.as_view(), name="availability"),
    path("calendar/", CalendarView.as_view(), name="calendar"),
    path("holds/", HoldListView.as_view(), name="hold-list"),
    path("holds/<str:proposal_id>/", HoldDetailView.as_view(), name="hold-detail"),
    path("", include(router.urls)),
]
