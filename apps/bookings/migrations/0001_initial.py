import apps.bookings.models
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("rooms", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                (
                    "code",
                    models.CharField(
                        default=apps.bookings.models.generate_booking_code,
                        editable=False,
                        max_length=15,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "guest_tier",
                    models.CharField(
                        choices=[("resident", "Resident"), ("external", "External guest")],
                        default="external",
                        max_length=10,
                    ),
                ),
                ("is_bulk", models.BooleanField(default=False)),
                ("start_date", models.DateField(help_text="First night of the earliest room.")),
                ("end_date", models.DateField(help_text="Checkout date of the latest room.")),
                ("name", models.CharField(max_length=150)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("notes", models.TextField(blank=True)),
                ("adults", models.PositiveSmallIntegerField(default=0)),
                ("children", models.PositiveSmallIntegerField(default=0)),
                ("toddlers", models.PositiveSmallIntegerField(default=0)),
                ("total_price", models.PositiveIntegerField(default=0)),
                (
                    "edit_token",
                    models.CharField(
                        default=apps.bookings.models.generate_edit_token,
                        editable=False,
                        max_length=30,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["start_date", "code"],
                "indexes": [
                    models.Index(fields=["start_date", "end_date"], name="booking_dates_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="booking_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProposedBooking",
            fields=[
                (
                    "proposal_id",
                    models.CharField(
                        default=apps.bookings.models.generate_proposal_id,
                        editable=False,
                        max_length=20,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("session_id", models.CharField(db_index=True, max_length=64)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "guest_tier",
                    models.CharField(
                        choices=[("resident", "Resident"), ("external", "External guest")],
                        default="external",
                        max_length=10,
                    ),
                ),
                ("is_bulk", models.BooleanField(default=False)),
                ("adults", models.PositiveSmallIntegerField(default=0)),
                ("children", models.PositiveSmallIntegerField(default=0)),
                ("toddlers", models.PositiveSmallIntegerField(default=0)),
                (
                    "total_price",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Price preview at the time the hold was placed.",
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("expires_at", models.DateTimeField(db_index=True)),
                ("rooms", models.ManyToManyField(related_name="holds", to="rooms.room")),
            ],
            options={
                "verbose_name": "Proposed booking",
                "verbose_name_plural": "Proposed bookings",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["start_date", "end_date"], name="proposed_booking_dates_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="proposed_booking_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingRoom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("adults", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("children", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("toddlers", models.PositiveSmallIntegerField(blank=True, null=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="room_stays",
                        to="bookings.booking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stays",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booked room",
                "verbose_name_plural": "Booked rooms",
                "ordering": ["booking", "room"],
                "indexes": [
                    models.Index(fields=["room", "start_date", "end_date"], name="booking_room_dates_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("booking", "room"), name="booking_room_once"),
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="booking_room_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingGuest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, max_length=150)),
                (
                    "person_type",
                    models.CharField(
                        choices=[("adult", "Adult"), ("child", "Child"), ("toddler", "Toddler")],
                        max_length=10,
                    ),
                ),
                (
                    "price_tier",
                    models.CharField(
                        choices=[("resident", "Resident"), ("external", "External guest")],
                        max_length=10,
                    ),
                ),
                ("position", models.PositiveSmallIntegerField(default=0)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="guests",
                        to="bookings.booking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Guest",
                "verbose_name_plural": "Guests",
                "ordering": ["booking", "position"],
            },
        ),
        migrations.CreateModel(
            name="RoomNight",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("night", models.DateField(help_text="Date the night starts on.")),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nights",
                        to="bookings.booking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="claimed_nights",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Room night",
                "verbose_name_plural": "Room nights",
                "ordering": ["room", "night"],
                "constraints": [
                    models.UniqueConstraint(fields=("room", "night"), name="room_night_single_claim"),
                ],
            },
        ),
    ]
