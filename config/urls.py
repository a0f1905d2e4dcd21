"""URL configuration for the chalet booking project.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the versioned API of each app and the OpenAPI schema.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/rooms/', include('apps.rooms.urls')),
    path('api/v1/pricing/', include('apps.pricing.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    # API documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
