"""Booking domain models for the chalet."""

from __future__ import annotations

import secrets
import string

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.pricing.models import GuestTier
from shared.domain.value_objects import DateRange

_CODE_ALPHABET = string.ascii_uppercase + string.digits
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits


def generate_proposal_id() -> str:
    return f"PROP{secrets.token_hex(6).upper()}"


def generate_booking_code() -> str:
    return "BK" + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(13))


def generate_edit_token() -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(30))


class ProposedBookingQuerySet(models.QuerySet):
    def live(self, now=None):  # type: ignore
        """Holds that still claim their nights."""
        return self.filter(expires_at__gt=now or timezone.now())

    def expired(self, now=None):  # type: ignore
        return self.filter(expires_at__lt=now or timezone.now())

    def overlapping(self, dates: DateRange):  # type: ignore
        return self.filter(start_date__lt=dates.end_date, end_date__gt=dates.start_date)


class ProposedBooking(models.Model):
    """
    Temporary hold on room-nights while a guest fills in the booking form.

    A hold stops counting once ``expires_at`` has passed, whether or not the
    sweep has deleted the row yet.
    """

    proposal_id = models.CharField(
        max_length=20,
        primary_key=True,
        default=generate_proposal_id,
        editable=False,
    )
    session_id = models.CharField(max_length=64, db_index=True)
    start_date = models.DateField()
    end_date = models.DateField()
    rooms = models.ManyToManyField("rooms.Room", related_name="holds")
    guest_tier = models.CharField(max_length=10, choices=GuestTier.choices, default=GuestTier.EXTERNAL)
    is_bulk = models.BooleanField(default=False)
    adults = models.PositiveSmallIntegerField(default=0)
    children = models.PositiveSmallIntegerField(default=0)
    toddlers = models.PositiveSmallIntegerField(default=0)
    total_price = models.PositiveIntegerField(
        default=0,
        help_text=_("Price preview at the time the hold was placed."),
    )
    created_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField(db_index=True)

    objects = ProposedBookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Proposed booking")
        verbose_name_plural = _("Proposed bookings")
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="proposed_booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="proposed_booking_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.proposal_id} ({self.start_date} - {self.end_date})"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


class Booking(models.Model):
    """Confirmed booking of one or more rooms, or of the whole chalet."""

    code = models.CharField(
        max_length=15,
        primary_key=True,
        default=generate_booking_code,
        editable=False,
    )
    guest_tier = models.CharField(max_length=10, choices=GuestTier.choices, default=GuestTier.EXTERNAL)
    is_bulk = models.BooleanField(default=False)
    start_date = models.DateField(help_text=_("First night of the earliest room."))
    end_date = models.DateField(help_text=_("Checkout date of the latest room."))
    name = models.CharField(max_length=150)
    email = models.EmailField()
    phone = models.CharField(max_length=32, blank=True)
    notes = models.TextField(blank=True)
    adults = models.PositiveSmallIntegerField(default=0)
    children = models.PositiveSmallIntegerField(default=0)
    toddlers = models.PositiveSmallIntegerField(default=0)
    total_price = models.PositiveIntegerField(default=0)
    edit_token = models.CharField(max_length=30, default=generate_edit_token, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["start_date", "code"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="booking_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.code} ({self.start_date} - {self.end_date})"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    def as_shape_data(self) -> dict:
        """The booking's shape in the layout accepted by ``make_booking_request``."""

        rooms = []
        for stay in self.room_stays.all():
            entry = {"room": stay.room_id, "start_date": stay.start_date, "end_date": stay.end_date}
            if stay.adults is not None:
                entry.update(adults=stay.adults, children=stay.children or 0, toddlers=stay.toddlers or 0)
            rooms.append(entry)
        return {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "guest_tier": self.guest_tier,
            "is_bulk": self.is_bulk,
            "rooms": rooms,
            "adults": self.adults,
            "children": self.children,
            "toddlers": self.toddlers,
            "guests": [
                {
                    "name": guest.name,
                    "person_type": guest.person_type,
                    "price_tier": guest.price_tier,
                    "room": guest.room_id,
                }
                for guest in self.guests.all()
            ],
        }


class BookingRoom(models.Model):
    """A room of a booking with its own date range and optional guest counts."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="room_stays")
    room = models.ForeignKey("rooms.Room", on_delete=models.PROTECT, related_name="stays")
    start_date = models.DateField()
    end_date = models.DateField()
    adults = models.PositiveSmallIntegerField(null=True, blank=True)
    children = models.PositiveSmallIntegerField(null=True, blank=True)
    toddlers = models.PositiveSmallIntegerField(null=True, blank=True)

    class Meta:
        verbose_name = _("Booked room")
        verbose_name_plural = _("Booked rooms")
        ordering = ["booking", "room"]
        constraints = [
            models.UniqueConstraint(fields=["booking", "room"], name="booking_room_once"),
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="booking_room_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_date", "end_date"], name="booking_room_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.booking_id} / room {self.room_id}"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


class BookingGuest(models.Model):
    """Named guest on a booking's roster."""

    class PersonType(models.TextChoices):
        ADULT = "adult", _("Adult")
        CHILD = "child", _("Child")
        TODDLER = "toddler", _("Toddler")

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="guests")
    name = models.CharField(max_length=150, blank=True)
    person_type = models.CharField(max_length=10, choices=PersonType.choices)
    price_tier = models.CharField(max_length=10, choices=GuestTier.choices)
    room = models.ForeignKey(
        "rooms.Room",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Guest")
        verbose_name_plural = _("Guests")
        ordering = ["booking", "position"]

    def __str__(self) -> str:
        return f"{self.name or self.person_type} ({self.booking_id})"


class RoomNight(models.Model):
    """
    Ledger of room-nights claimed by confirmed bookings.

    The unique constraint is the final arbiter between racing commits.
    """

    room = models.ForeignKey("rooms.Room", on_delete=models.PROTECT, related_name="claimed_nights")
    night = models.DateField(help_text=_("Date the night starts on."))
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="nights")

    class Meta:
        verbose_name = _("Room night")
        verbose_name_plural = _("Room nights")
        ordering = ["room", "night"]
        constraints = [
            models.UniqueConstraint(fields=["room", "night"], name="room_night_single_claim"),
        ]

    def __str__(self) -> str:
        return f"Room {self.room_id} on {self.night} ({self.booking_id})"
