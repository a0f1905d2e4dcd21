import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("chalet_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Delete expired holds every minute; availability never waits for this
    "expire-holds": {
        "task": "bookings.expire_holds",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
}
