"""
Booking Event Handlers

Subscribers for booking domain events. The core only logs; mailers and
calendar caches subscribe through the same message bus.
"""

import logging

from shared.application.message_bus import message_bus
from apps.bookings.domain.events import (
    BookingCommitted,
    BookingDeleted,
    BookingUpdated,
    HoldCreated,
    HoldReleased,
)

logger = logging.getLogger(__name__)


def log_hold_created(event: HoldCreated):
    logger.info(
        f"[EVENT] Hold {event.aggregate_id} by session {event.session_id} "
        f"on rooms {', '.join(event.room_ids)} for {event.dates}"
    )


def log_hold_released(event: HoldReleased):
    logger.info(f"[EVENT] {len(event.proposal_ids)} hold(s) released ({event.reason})")


def log_booking_committed(event: BookingCommitted):
    logger.info(
        f"[EVENT] Booking {event.aggregate_id} committed for {event.dates}, "
        f"rooms {', '.join(event.room_ids)}, total {event.total_price}"
    )


def log_booking_updated(event: BookingUpdated):
    logger.info(f"[EVENT] Booking {event.aggregate_id} updated, total {event.total_price}")


def log_booking_deleted(event: BookingDeleted):
    logger.info(f"[EVENT] Booking {event.aggregate_id} deleted")


def register_event_handlers():
    message_bus.register_event_handler(HoldCreated, log_hold_created)
    message_bus.register_event_handler(HoldReleased, log_hold_released)
    message_bus.register_event_handler(BookingCommitted, log_booking_committed)
    message_bus.register_event_handler(BookingUpdated, log_booking_updated)
    message_bus.register_event_handler(BookingDeleted, log_booking_deleted)
