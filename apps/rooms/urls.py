"""URL routing for rooms and blockages."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import BlockageViewSet, RoomViewSet

router = SimpleRouter()
router.register(r"blockages", BlockageViewSet, basename="blockage")
router.register(r"", RoomViewSet, basename="room")

urlpatterns = [
    path("", include(router.urls)),
]
