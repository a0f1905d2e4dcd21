"""Test settings.

In-memory SQLite, eager Celery and fast password hashing. Row locks are a
no-op on SQLite; the room-night unique constraint still applies.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

HOLD_TTL_MINUTES = 15
CHALET_MAX_ADVANCE_DAYS = 730
CHRISTMAS_PERIODS = []
CHRISTMAS_ACCESS_CODES = []
CHRISTMAS_RESIDENT_ROOM_LIMIT = 2
