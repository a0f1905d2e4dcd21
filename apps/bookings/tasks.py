"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .application.hold_manager import hold_manager

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_holds")
def expire_holds() -> dict[str, int]:
    """
    Delete holds whose expiry time has passed.

    Availability never depends on this task having run; expired holds are
    already ignored when resolving. Runs every minute via Celery Beat.

    Returns:
        dict: {"expired": number of deleted holds}
    """
    expired = hold_manager.expire_holds()
    return {"expired": expired}
