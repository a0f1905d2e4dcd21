"""Domain services for availability: locking, snapshots and the range check."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.rooms.models import Blockage, Room
from shared.domain.base import InvalidBookingRequest, RoomUnavailable
from shared.domain.value_objects import DateRange

from .domain.availability import (
    BlockageSpan,
    NightKind,
    Occupancy,
    OccupancySnapshot,
    RoomStatus,
)
from .models import BookingRoom, ProposedBooking

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def lock_rooms(room_ids: Optional[Iterable[str]] = None) -> Dict[str, Room]:
    """
    Lock room rows in id order and return them keyed by id.

    ``None`` locks every room. Every write path that claims room-nights
    takes these locks first, so two writers touching the same room
    serialize on the row lock instead of both passing the range check.
    """

    queryset = Room.objects.order_by("id")
    if room_ids is not None:
        queryset = queryset.filter(id__in=list(room_ids))
    queryset = _lock_queryset_if_possible(queryset)
    return {room.id: room for room in queryset}


def load_snapshot(
    window: DateRange,
    room_ids: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
) -> OccupancySnapshot:
    """Load everything claiming nights inside ``window`` for the given rooms."""

    now = now or timezone.now()
    wanted = set(room_ids) if room_ids is not None else None

    blockages: List[BlockageSpan] = []
    blockage_qs = Blockage.objects.filter(
        start_date__lt=window.end_date,
        end_date__gt=window.start_date,
    ).prefetch_related("rooms")
    for blockage in blockage_qs:
        blocked_rooms = frozenset(room.id for room in blockage.rooms.all())
        if wanted is not None and blocked_rooms and not (blocked_rooms & wanted):
            continue
        blockages.append(BlockageSpan(blockage.id, blockage.dates, blocked_rooms))

    occupancies: List[Occupancy] = []
    stays = BookingRoom.objects.filter(
        start_date__lt=window.end_date,
        end_date__gt=window.start_date,
    )
    if wanted is not None:
        stays = stays.filter(room_id__in=wanted)
    for stay in stays:
        occupancies.append(
            Occupancy(
                reservation_id=stay.booking_id,
                kind=NightKind.CONFIRMED,
                room_id=stay.room_id,
                dates=stay.dates,
            )
        )

    holds = ProposedBooking.objects.live(now).overlapping(window).prefetch_related("rooms")
    for hold in holds:
        for room in hold.rooms.all():
            if wanted is not None and room.id not in wanted:
                continue
            occupancies.append(
                Occupancy(
                    reservation_id=hold.proposal_id,
                    kind=NightKind.PROPOSED,
                    room_id=room.id,
                    dates=hold.dates,
                    session_id=hold.session_id,
                    expires_at=hold.expires_at,
                )
            )

    return OccupancySnapshot(now=now, blockages=blockages, occupancies=occupancies)


def ensure_nights_free(
    room_ranges: Mapping[str, DateRange],
    now: Optional[datetime] = None,
    exclude_proposals: Iterable[str] = (),
    exclude_booking: Optional[str] = None,
    ignore_blockages: bool = False,
) -> None:
    """
    Ensure every night of every requested range is unclaimed.

    Holds being superseded and the booking being edited are skipped.
    Callers run this inside the transaction that writes, after
    ``lock_rooms``.
    """

    if not room_ranges:
        return

    window = None
    for dates in room_ranges.values():
        window = dates if window is None else window.envelope(dates)

    excluded = set(exclude_proposals)
    if exclude_booking:
        excluded.add(exclude_booking)

    snapshot = load_snapshot(window, room_ranges.keys(), now)
    conflicts = snapshot.conflicts(room_ranges, exclude=excluded, ignore_blockages=ignore_blockages)
    if conflicts:
        rooms = sorted({conflict.room_id for conflict in conflicts})
        logger.info(
            "Room-night conflict for rooms %s in %s (%d night(s))",
            ", ".join(rooms),
            window,
            len(conflicts),
        )
        raise RoomUnavailable(
            f"Room(s) {', '.join(rooms)} are not available for the selected nights",
            details={"conflicts": [conflict.to_dict() for conflict in conflicts]},
        )


def _known_room_ids(room_ids: Optional[Iterable[str]]) -> List[str]:
    known = list(Room.objects.order_by("sort_order", "id").values_list("id", flat=True))
    if room_ids is None:
        return known
    requested = list(dict.fromkeys(room_ids))
    missing = sorted(set(requested) - set(known))
    if missing:
        raise InvalidBookingRequest(f"Unknown rooms: {', '.join(missing)}", field="rooms")
    return requested


def resolve(day: date, room_id: str, session_id: Optional[str] = None, now: Optional[datetime] = None) -> RoomStatus:
    """Availability of one room on one date."""

    _known_room_ids([room_id])
    window = DateRange(day - timedelta(days=1), day + timedelta(days=1))
    return load_snapshot(window, [room_id], now).resolve(day, room_id, session_id)


def resolve_calendar(
    dates: DateRange,
    room_ids: Optional[Iterable[str]] = None,
    session_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, List[RoomStatus]]:
    """Statuses for every date in ``dates`` and every requested room, from one snapshot."""

    rooms = _known_room_ids(room_ids)
    window = DateRange(dates.start_date - timedelta(days=1), dates.end_date)
    snapshot = load_snapshot(window, rooms, now)
    return {
        room_id: [snapshot.resolve(day, room_id, session_id) for day in dates.nights()]
        for room_id in rooms
    }
