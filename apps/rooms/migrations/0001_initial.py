import apps.rooms.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.CharField(max_length=10, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100)),
                (
                    "size",
                    models.CharField(
                        choices=[("small", "Small room"), ("large", "Large room")],
                        default="small",
                        max_length=10,
                    ),
                ),
                ("beds", models.PositiveSmallIntegerField(default=2)),
                ("sort_order", models.PositiveSmallIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Room",
                "verbose_name_plural": "Rooms",
                "ordering": ["sort_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="Blockage",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=apps.rooms.models.generate_blockage_id,
                        editable=False,
                        max_length=20,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(help_text="First night that is no longer blocked.")),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "rooms",
                    models.ManyToManyField(blank=True, related_name="blockages", to="rooms.room"),
                ),
            ],
            options={
                "verbose_name": "Blockage",
                "verbose_name_plural": "Blockages",
                "ordering": ["start_date"],
                "indexes": [
                    models.Index(fields=["start_date", "end_date"], name="blockage_dates_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="blockage_valid_date_range",
                    ),
                ],
            },
        ),
    ]
