"""
Booking Shapes

A booking request (what the guest is constructing) is turned into exactly
one pricing shape by ``build_shape``. The calculator then dispatches on
the shape type instead of re-inspecting the request.

Shapes:
- BulkShape: whole chalet, priced from the bulk table
- CompositeShape: several rooms with their own nights and/or guests
- PerGuestShape: named roster, possibly mixed guest tiers
- SimpleShape: aggregate counts only, one tier for the whole booking
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple, Union

from shared.domain.base import (
    GuestCountMismatch,
    InvalidBookingRequest,
    RoomCapacityExceeded,
    ValueObject,
)
from shared.domain.value_objects import DateRange

from .tables import GuestTier, PersonType, RoomSize


@dataclass(frozen=True)
class GuestCounts(ValueObject):
    adults: int = 0
    children: int = 0
    toddlers: int = 0

    def __post_init__(self):
        for name in ('adults', 'children', 'toddlers'):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise InvalidBookingRequest(
                    f"{name} must be a non-negative integer", field='guests'
                )

    @property
    def paying(self) -> int:
        return self.adults + self.children

    @property
    def total(self) -> int:
        return self.adults + self.children + self.toddlers

    def __add__(self, other: 'GuestCounts') -> 'GuestCounts':
        return GuestCounts(
            self.adults + other.adults,
            self.children + other.children,
            self.toddlers + other.toddlers,
        )

    @classmethod
    def of_roster(cls, roster: Iterable['RosterGuest']) -> 'GuestCounts':
        adults = children = toddlers = 0
        for guest in roster:
            if guest.person_type is PersonType.ADULT:
                adults += 1
            elif guest.person_type is PersonType.CHILD:
                children += 1
            else:
                toddlers += 1
        return cls(adults, children, toddlers)

    def to_dict(self) -> dict:
        return {'adults': self.adults, 'children': self.children, 'toddlers': self.toddlers}


@dataclass(frozen=True)
class RosterGuest(ValueObject):
    """A named guest with an individual price tier and optional room"""
    name: str
    person_type: PersonType
    price_tier: GuestTier
    room_id: str | None = None


@dataclass(frozen=True)
class PricedRoom(ValueObject):
    room_id: str
    size: RoomSize
    beds: int = 0


@dataclass(frozen=True)
class RoomRequest(ValueObject):
    """One room of a booking, with optional per-room dates and counts"""
    room: PricedRoom
    dates: DateRange | None = None
    counts: GuestCounts | None = None


@dataclass(frozen=True)
class BookingRequest(ValueObject):
    """
    Everything the guest has chosen so far

    ``dates`` is the default range of every room; a room with its own
    ``dates`` overrides it. The same request object drives the preview
    endpoint and the authoritative commit.
    """
    dates: DateRange
    tier: GuestTier
    rooms: Tuple[RoomRequest, ...]
    counts: GuestCounts
    roster: Tuple[RosterGuest, ...] = ()
    is_bulk: bool = False

    def range_for(self, room_request: RoomRequest) -> DateRange:
        return room_request.dates or self.dates

    def room_ranges(self) -> Dict[str, DateRange]:
        return {rr.room.room_id: self.range_for(rr) for rr in self.rooms}

    @property
    def room_ids(self) -> Tuple[str, ...]:
        return tuple(rr.room.room_id for rr in self.rooms)

    def envelope(self) -> DateRange:
        result = None
        for room_range in self.room_ranges().values():
            result = room_range if result is None else result.envelope(room_range)
        return result or self.dates

    @property
    def has_room_dates(self) -> bool:
        return any(rr.dates is not None and rr.dates != self.dates for rr in self.rooms)

    @property
    def has_room_counts(self) -> bool:
        return any(rr.counts is not None for rr in self.rooms)


# ===== Shapes =====

@dataclass(frozen=True)
class BulkShape(ValueObject):
    nights: int
    tier: GuestTier
    counts: GuestCounts


@dataclass(frozen=True)
class SimpleShape(ValueObject):
    nights: int
    tier: GuestTier
    rooms: Tuple[PricedRoom, ...]
    counts: GuestCounts


@dataclass(frozen=True)
class PerGuestShape(ValueObject):
    nights: int
    rooms: Tuple[PricedRoom, ...]
    guests: Tuple[RosterGuest, ...]


@dataclass(frozen=True)
class CompositeShape(ValueObject):
    parts: Tuple[Union[SimpleShape, PerGuestShape], ...]


BookingShape = Union[BulkShape, CompositeShape, PerGuestShape, SimpleShape]


def validate_roster(request: BookingRequest) -> None:
    """
    Input checks shared by every strategy

    Raises:
        InvalidBookingRequest: no rooms, duplicate rooms, guest assigned
            to a room outside the booking
        GuestCountMismatch: roster or per-room counts disagree with totals
        RoomCapacityExceeded: more paying guests in a room than beds
    """
    if not request.rooms:
        raise InvalidBookingRequest("At least one room is required", field='rooms')

    room_ids = request.room_ids
    if len(set(room_ids)) != len(room_ids):
        raise InvalidBookingRequest("A room may appear only once per booking", field='rooms')

    if request.roster:
        roster_counts = GuestCounts.of_roster(request.roster)
        if roster_counts != request.counts:
            raise GuestCountMismatch(
                f"Guest list has {roster_counts.adults} adult(s), {roster_counts.children} "
                f"child(ren), {roster_counts.toddlers} toddler(s) but the booking declares "
                f"{request.counts.adults}/{request.counts.children}/{request.counts.toddlers}",
                details={'roster': roster_counts.to_dict(), 'declared': request.counts.to_dict()},
            )
        for guest in request.roster:
            if guest.room_id is not None and guest.room_id not in room_ids:
                raise InvalidBookingRequest(
                    f"Guest {guest.name!r} is assigned to room {guest.room_id} "
                    f"which is not part of the booking",
                    field='guests',
                )

    if request.has_room_counts:
        summed = GuestCounts()
        for rr in request.rooms:
            summed = summed + (rr.counts or GuestCounts())
        if summed != request.counts:
            raise GuestCountMismatch(
                "Per-room guest counts do not add up to the booking totals",
                details={'rooms': summed.to_dict(), 'declared': request.counts.to_dict()},
            )

    if request.is_bulk:
        return

    # Capacity only counts paying guests; toddlers share beds
    for rr in request.rooms:
        if rr.room.beds <= 0:
            continue
        if rr.counts is not None:
            paying = rr.counts.paying
        else:
            paying = sum(
                1 for guest in request.roster
                if guest.room_id == rr.room.room_id and guest.person_type is not PersonType.TODDLER
            )
        if paying > rr.room.beds:
            raise RoomCapacityExceeded(
                f"Room {rr.room.room_id} has {rr.room.beds} bed(s) but {paying} paying guest(s)",
                details={'room': rr.room.room_id, 'beds': rr.room.beds, 'guests': paying},
            )


def _room_part(request: BookingRequest, rr: RoomRequest) -> Union[SimpleShape, PerGuestShape]:
    nights = request.range_for(rr).night_count
    if request.roster:
        assigned = tuple(g for g in request.roster if g.room_id == rr.room.room_id)
        if assigned:
            return PerGuestShape(nights=nights, rooms=(rr.room,), guests=assigned)
        counts = GuestCounts()
    else:
        counts = rr.counts or GuestCounts()
    return SimpleShape(nights=nights, tier=request.tier, rooms=(rr.room,), counts=counts)


def build_shape(request: BookingRequest) -> BookingShape:
    """
    Select the pricing strategy for a request, once

    Order of specificity: bulk, composite, per-guest, simple.
    """
    validate_roster(request)

    if request.is_bulk:
        return BulkShape(
            nights=request.envelope().night_count,
            tier=request.tier,
            counts=request.counts,
        )

    if len(request.rooms) > 1 and (request.has_room_dates or request.has_room_counts):
        if request.roster and any(g.room_id is None for g in request.roster):
            raise InvalidBookingRequest(
                "Every guest must be assigned to a room when rooms have their own dates or guests",
                field='guests',
            )
        if not request.roster and not request.has_room_counts and request.counts.paying:
            raise InvalidBookingRequest(
                "Rooms with their own dates need a per-room guest breakdown",
                field='guests',
            )
        return CompositeShape(parts=tuple(_room_part(request, rr) for rr in request.rooms))

    nights = request.envelope().night_count
    rooms = tuple(rr.room for rr in request.rooms)
    if request.roster:
        return PerGuestShape(nights=nights, rooms=rooms, guests=request.roster)
    return SimpleShape(nights=nights, tier=request.tier, rooms=rooms, counts=request.counts)
