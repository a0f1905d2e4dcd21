"""API views for availability, holds and confirmed bookings."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, views, viewsets  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.pricing.serializers import BookingShapeSerializer
from apps.pricing.services import make_booking_request
from shared.domain.base import InvalidBookingRequest, InvalidDateRange
from shared.domain.value_objects import DateRange

from .application.hold_manager import ContactDetails, hold_manager
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    AvailabilityQuerySerializer,
    BookingCommitSerializer,
    BookingCreatedSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
    CalendarQuerySerializer,
    HoldSerializer,
)
from .services import resolve, resolve_calendar

SESSION_HEADER = "X-Session-Id"
EDIT_TOKEN_HEADER = "X-Edit-Token"
MAX_CALENDAR_DAYS = 400


def _session_id(request) -> str | None:  # type: ignore
    return request.headers.get(SESSION_HEADER) or None


def _is_admin(request) -> bool:  # type: ignore
    return bool(request.user and request.user.is_staff)


def _contact(data) -> ContactDetails:  # type: ignore
    return ContactDetails(
        name=data["name"],
        email=data["email"],
        phone=data.get("phone", ""),
        notes=data.get("notes", ""),
    )


class AvailabilityView(views.APIView):
    """Status of one room on one date."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = resolve(
            query.validated_data["date"],
            query.validated_data["room"],
            session_id=_session_id(request),
        )
        return Response(result.to_dict())


class CalendarView(views.APIView):
    """Grid of statuses for a date window, resolved from a single snapshot."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        dates = DateRange(data["start"], data["end"])
        if dates.night_count > MAX_CALENDAR_DAYS:
            raise InvalidDateRange(f"Calendar window is limited to {MAX_CALENDAR_DAYS} days")

        grid = resolve_calendar(dates, data.get("rooms") or None, session_id=_session_id(request))
        return Response(
            {
                "start": dates.start_date,
                "end": dates.end_date,
                "rooms": {
                    room_id: [cell.to_dict() for cell in cells]
                    for room_id, cells in grid.items()
                },
            }
        )


class HoldListView(views.APIView):
    """Holds of the calling session (identified by the ``X-Session-Id`` header)."""

    permission_classes = [permissions.AllowAny]

    def _require_session(self, request) -> str:  # type: ignore
        session_id = _session_id(request)
        if not session_id:
            raise InvalidBookingRequest(f"Missing {SESSION_HEADER} header", field="session")
        return session_id

    def get(self, request):  # type: ignore
        holds = hold_manager.session_holds(self._require_session(request))
        return Response(HoldSerializer(holds, many=True).data)

    def post(self, request):  # type: ignore
        session_id = self._require_session(request)
        serializer = BookingShapeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        hold = hold_manager.create_hold(
            session_id,
            make_booking_request(data),
            christmas_code=data["christmas_code"] or None,
        )
        return Response(HoldSerializer(hold).data, status=status.HTTP_201_CREATED)

    def delete(self, request):  # type: ignore
        deleted = hold_manager.delete_session_holds(self._require_session(request))
        return Response({"deleted": deleted}, status=status.HTTP_200_OK)


class HoldDetailView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def delete(self, request, proposal_id: str):  # type: ignore
        hold_manager.delete_hold(proposal_id, session_id=_session_id(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class BookingViewSet(
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """
    Confirmed bookings.

    Anyone may commit; reading, changing or deleting a booking needs its
    edit token in ``X-Edit-Token`` unless the caller is an admin. Listing
    is admin only.
    """

    queryset = Booking.objects.prefetch_related("room_stays", "guests").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet
    lookup_field = "code"
    lookup_value_regex = "BK[0-9A-Z]+"

    def list(self, request, *args, **kwargs):  # type: ignore
        if not _is_admin(request):
            raise PermissionDenied()
        return super().list(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCommitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = hold_manager.commit_booking(
            data["proposal_ids"],
            make_booking_request(data),
            _contact(data),
            session_id=_session_id(request),
            christmas_code=data["christmas_code"] or None,
        )
        return Response(
            BookingCreatedSerializer(self._reload(booking)).data,
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, code=None):  # type: ignore
        booking = hold_manager.get_booking(code, request.headers.get(EDIT_TOKEN_HEADER), admin=_is_admin(request))
        return Response(BookingSerializer(self._reload(booking)).data)

    def update(self, request, code=None):  # type: ignore
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = hold_manager.update_booking(
            code,
            request.headers.get(EDIT_TOKEN_HEADER),
            make_booking_request(data),
            _contact(data),
            admin=_is_admin(request),
            christmas_code=data["christmas_code"] or None,
        )
        return Response(BookingSerializer(self._reload(booking)).data)

    def destroy(self, request, code=None):  # type: ignore
        hold_manager.delete_booking(code, request.headers.get(EDIT_TOKEN_HEADER), admin=_is_admin(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _reload(self, booking: Booking) -> Booking:
        return self.get_queryset().get(pk=booking.pk)
