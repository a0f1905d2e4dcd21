import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BulkRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("base_price", models.PositiveIntegerField()),
                ("resident_adult_price", models.PositiveIntegerField()),
                ("resident_child_price", models.PositiveIntegerField()),
                ("external_adult_price", models.PositiveIntegerField()),
                ("external_child_price", models.PositiveIntegerField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Bulk rate",
                "verbose_name_plural": "Bulk rates",
            },
        ),
        migrations.CreateModel(
            name="RoomRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "guest_tier",
                    models.CharField(
                        choices=[("resident", "Resident"), ("external", "External guest")],
                        max_length=10,
                    ),
                ),
                (
                    "room_size",
                    models.CharField(
                        choices=[("small", "Small room"), ("large", "Large room")],
                        max_length=10,
                    ),
                ),
                ("empty_price", models.PositiveIntegerField(help_text="Nightly price of the room without guests.")),
                ("adult_price", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("child_price", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Room rate",
                "verbose_name_plural": "Room rates",
                "ordering": ["guest_tier", "room_size"],
                "constraints": [
                    models.UniqueConstraint(fields=("guest_tier", "room_size"), name="room_rate_unique_tier_size"),
                ],
            },
        ),
    ]
