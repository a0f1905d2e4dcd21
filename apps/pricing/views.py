"""Price preview and admin price table endpoints."""

from __future__ import annotations

from rest_framework import permissions, status, views  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.base import InvalidPriceConfiguration

from .serializers import BookingShapeSerializer, PriceQuoteSerializer
from .services import make_booking_request, quote, replace_price_tables, stored_price_tables_data


class PricePreviewView(views.APIView):
    """Live price for the booking the guest is putting together."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):  # type: ignore
        serializer = BookingShapeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking_request = make_booking_request(serializer.validated_data)
        price = quote(booking_request)
        return Response(PriceQuoteSerializer(price).data)


class PriceTablesView(views.APIView):
    """Read or replace the whole price configuration."""

    permission_classes = [permissions.IsAdminUser]

    def get(self, request):  # type: ignore
        return Response(stored_price_tables_data())

    def put(self, request):  # type: ignore
        try:
            tables = replace_price_tables(request.data)
        except InvalidPriceConfiguration as exc:
            # Rejected admin input, the stored tables are untouched
            return Response(exc.to_dict(), status=status.HTTP_400_BAD_REQUEST)
        return Response(tables.to_dict(), status=status.HTTP_200_OK)
