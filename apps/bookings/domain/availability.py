"""
Availability Resolver

Classifies a calendar date for a room from the blockages, confirmed
bookings and live holds around it. Pure: everything the resolver needs is
captured in an ``OccupancySnapshot``, so resolving the same snapshot twice
gives the same answer.

Occupancy is a property of nights. For a date D the resolver looks at the
night before (D-1 -> D, D is a checkout) and the night after (D -> D+1,
D is a check-in):

1. A blockage on the night after -> BLOCKED
2. Both nights free -> AVAILABLE
3. Both nights held by the same reservation -> BOOKED / PROPOSED
4. Only one night occupied -> BOOKED / PROPOSED per that side
5. Both occupied by different reservations -> EDGE
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from shared.domain.base import ValueObject
from shared.domain.value_objects import DateRange


class NightKind(str, Enum):
    NONE = 'none'
    CONFIRMED = 'confirmed'
    PROPOSED = 'proposed'


class AvailabilityStatus(str, Enum):
    AVAILABLE = 'available'
    BOOKED = 'booked'
    BLOCKED = 'blocked'
    PROPOSED = 'proposed'
    EDGE = 'edge'


_STATUS_FOR_KIND = {
    NightKind.CONFIRMED: AvailabilityStatus.BOOKED,
    NightKind.PROPOSED: AvailabilityStatus.PROPOSED,
}


@dataclass(frozen=True)
class BlockageSpan(ValueObject):
    """A blockage; no room ids means every room"""
    blockage_id: str
    dates: DateRange
    room_ids: FrozenSet[str] = frozenset()

    def applies_to(self, room_id: str, night: date) -> bool:
        if self.room_ids and room_id not in self.room_ids:
            return False
        return self.dates.contains_night(night)


@dataclass(frozen=True)
class Occupancy(ValueObject):
    """
    One room of a confirmed booking or hold over its date range

    Holds carry ``expires_at`` and stop claiming nights once it passes.
    """
    reservation_id: str
    kind: NightKind
    room_id: str
    dates: DateRange
    session_id: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_live(self, now: datetime) -> bool:
        if self.kind is NightKind.CONFIRMED or self.expires_at is None:
            return True
        return now < self.expires_at


@dataclass(frozen=True)
class NightClaim(ValueObject):
    kind: NightKind = NightKind.NONE
    reservation_id: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def occupied(self) -> bool:
        return self.kind is not NightKind.NONE

    def held_by(self, session_id: Optional[str]) -> bool:
        return bool(session_id) and self.kind is NightKind.PROPOSED and self.session_id == session_id


FREE_NIGHT = NightClaim()


@dataclass(frozen=True)
class RoomStatus(ValueObject):
    """
    Resolved classification of one (date, room) cell

    Reservation ids are kept for both sides; ``to_dict`` only shows the
    ones belonging to the caller's own holds.
    """
    date: date
    room_id: str
    status: AvailabilityStatus
    night_before_kind: NightKind = NightKind.NONE
    night_after_kind: NightKind = NightKind.NONE
    night_before_reservation: Optional[str] = None
    night_after_reservation: Optional[str] = None
    night_before_own: bool = False
    night_after_own: bool = False
    is_mixed: bool = False
    blockage_id: Optional[str] = None

    @property
    def night_before_occupied(self) -> bool:
        return self.night_before_kind is not NightKind.NONE

    @property
    def night_after_occupied(self) -> bool:
        return self.night_after_kind is not NightKind.NONE

    @property
    def own_hold(self) -> bool:
        return self.night_before_own or self.night_after_own

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'room': self.room_id,
            'status': self.status.value,
            'night_before_kind': self.night_before_kind.value,
            'night_after_kind': self.night_after_kind.value,
            'night_before_occupied': self.night_before_occupied,
            'night_after_occupied': self.night_after_occupied,
            'night_before_reservation': self.night_before_reservation if self.night_before_own else None,
            'night_after_reservation': self.night_after_reservation if self.night_after_own else None,
            'is_mixed': self.is_mixed,
            'own_hold': self.own_hold,
            'blockage': self.blockage_id,
        }


@dataclass(frozen=True)
class NightConflict(ValueObject):
    room_id: str
    night: date
    kind: str
    reservation_id: Optional[str] = None

    def to_dict(self) -> dict:
        # Hold ids are not shown to other sessions
        return {
            'room': self.room_id,
            'night': self.night.isoformat(),
            'kind': self.kind,
            'reservation': None if self.kind == NightKind.PROPOSED.value else self.reservation_id,
        }


@dataclass
class OccupancySnapshot:
    """
    Everything that claims room-nights at a point in time

    ``now`` decides which holds are live. Expired holds may still be in
    ``occupancies``; they are ignored here.
    """
    now: datetime
    blockages: List[BlockageSpan] = field(default_factory=list)
    occupancies: List[Occupancy] = field(default_factory=list)

    def __post_init__(self):
        self._by_room: Dict[str, List[Occupancy]] = defaultdict(list)
        for occupancy in self.occupancies:
            if occupancy.is_live(self.now):
                self._by_room[occupancy.room_id].append(occupancy)

    def blockage_for(self, room_id: str, night: date) -> Optional[BlockageSpan]:
        for blockage in self.blockages:
            if blockage.applies_to(room_id, night):
                return blockage
        return None

    def claim_for(self, room_id: str, night: date, exclude: Iterable[str] = ()) -> NightClaim:
        """Who claims ``night`` for ``room_id``. Confirmed bookings win over holds."""
        excluded = set(exclude)
        found = None
        for occupancy in self._by_room.get(room_id, ()):
            if occupancy.reservation_id in excluded or not occupancy.dates.contains_night(night):
                continue
            if occupancy.kind is NightKind.CONFIRMED:
                found = occupancy
                break
            if found is None:
                found = occupancy
        if found is None:
            return FREE_NIGHT
        return NightClaim(found.kind, found.reservation_id, found.session_id)

    def resolve(self, day: date, room_id: str, session_id: Optional[str] = None) -> RoomStatus:
        before = self.claim_for(room_id, day - timedelta(days=1))
        after = self.claim_for(room_id, day)
        fields = dict(
            date=day,
            room_id=room_id,
            night_before_kind=before.kind,
            night_after_kind=after.kind,
            night_before_reservation=before.reservation_id,
            night_after_reservation=after.reservation_id,
            night_before_own=before.held_by(session_id),
            night_after_own=after.held_by(session_id),
        )

        blockage = self.blockage_for(room_id, day)
        if blockage is not None:
            return RoomStatus(status=AvailabilityStatus.BLOCKED, blockage_id=blockage.blockage_id, **fields)

        if not before.occupied and not after.occupied:
            return RoomStatus(status=AvailabilityStatus.AVAILABLE, **fields)

        if before.occupied and after.occupied:
            if before.kind is after.kind and before.reservation_id == after.reservation_id:
                return RoomStatus(status=_STATUS_FOR_KIND[after.kind], **fields)
            # Two reservations meet on this date
            return RoomStatus(status=AvailabilityStatus.EDGE, is_mixed=True, **fields)

        occupied = after if after.occupied else before
        return RoomStatus(status=_STATUS_FOR_KIND[occupied.kind], **fields)

    def conflicts(
        self,
        room_ranges: Mapping[str, DateRange],
        exclude: Iterable[str] = (),
        ignore_blockages: bool = False,
    ) -> List[NightConflict]:
        """
        Every claimed night inside the requested ranges

        A range is free when each of its nights is free; the checkout date
        itself is never checked, so back-to-back stays do not conflict.
        """
        excluded = set(exclude)
        found: List[NightConflict] = []
        for room_id, dates in room_ranges.items():
            for night in dates.nights():
                if not ignore_blockages:
                    blockage = self.blockage_for(room_id, night)
                    if blockage is not None:
                        found.append(NightConflict(room_id, night, 'blocked', blockage.blockage_id))
                        continue
                claim = self.claim_for(room_id, night, exclude=excluded)
                if claim.occupied:
                    found.append(NightConflict(room_id, night, claim.kind.value, claim.reservation_id))
        return found
