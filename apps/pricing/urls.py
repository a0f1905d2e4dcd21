"""URL routing for pricing."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import PricePreviewView, PriceTablesView

urlpatterns = [
    path("preview/", PricePreviewView.as_view(), name="price-preview"),
    path("tables/", PriceTablesView.as_view(), name="price-tables"),
]
