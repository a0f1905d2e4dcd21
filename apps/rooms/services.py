"""Domain services for rooms and blockages."""

from __future__ import annotations

import logging
from typing import Iterable

from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import InvalidBookingRequest
from shared.domain.value_objects import DateRange

from .models import Blockage, Room

logger = logging.getLogger(__name__)

# id, name, size, beds
DEFAULT_ROOMS = (
    ("12", "Room 12", Room.Size.SMALL, 2),
    ("13", "Room 13", Room.Size.SMALL, 3),
    ("14", "Room 14", Room.Size.LARGE, 4),
    ("22", "Room 22", Room.Size.SMALL, 2),
    ("23", "Room 23", Room.Size.SMALL, 3),
    ("24", "Room 24", Room.Size.LARGE, 4),
    ("42", "Room 42", Room.Size.SMALL, 2),
    ("43", "Room 43", Room.Size.SMALL, 2),
    ("44", "Room 44", Room.Size.LARGE, 4),
)


def seed_default_rooms() -> int:
    """Create the chalet's rooms if they are missing. Returns how many were created."""

    created = 0
    for order, (room_id, name, size, beds) in enumerate(DEFAULT_ROOMS):
        _, was_created = Room.objects.get_or_create(
            id=room_id,
            defaults={"name": name, "size": size, "beds": beds, "sort_order": order},
        )
        created += int(was_created)
    return created


def create_blockage(dates: DateRange, room_ids: Iterable[str] = (), reason: str = "") -> Blockage:
    """
    Block room-nights for the given rooms (all rooms when empty).

    Runs under the same room locks as hold creation and booking commits, so
    a blockage never lands on a night that a confirmed booking or a live
    hold already claims.
    """
    from apps.bookings.services import ensure_nights_free, lock_rooms

    requested = sorted(set(room_ids))
    with DjangoUnitOfWork():
        rooms = lock_rooms(requested or None)
        if requested and len(rooms) != len(requested):
            missing = sorted(set(requested) - set(rooms))
            raise InvalidBookingRequest(f"Unknown rooms: {', '.join(missing)}", field="rooms")

        # Overlapping blockages are harmless; only reservations conflict.
        ensure_nights_free({room_id: dates for room_id in rooms}, ignore_blockages=True)

        blockage = Blockage.objects.create(
            start_date=dates.start_date,
            end_date=dates.end_date,
            reason=reason,
        )
        if requested:
            blockage.rooms.set(rooms.values())

    logger.info(
        "Blockage %s created for %s (rooms: %s)",
        blockage.id,
        dates,
        ", ".join(requested) or "all",
    )
    return blockage


def delete_blockage(blockage_id: str) -> bool:
    deleted, _ = Blockage.objects.filter(pk=blockage_id).delete()
    if deleted:
        logger.info("Blockage %s deleted", blockage_id)
    return bool(deleted)
