"""DRF exception handler that renders domain errors.

Conflicts (409) and validation failures (400) get distinct ``code`` values
so the UI can either send the guest back to date selection or highlight
the offending form field.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.base import BookingError

logger = logging.getLogger(__name__)


def booking_exception_handler(exc, context):  # type: ignore
    if isinstance(exc, BookingError):
        view = context.get("view")
        logger.info(
            "Domain error %s in %s: %s",
            exc.code,
            view.__class__.__name__ if view else "unknown view",
            exc.message,
        )
        return Response(exc.to_dict(), status=exc.status_code)
    return drf_exception_handler(exc, context)
