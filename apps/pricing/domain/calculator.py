"""
Price Calculator

Pure functions turning a booking shape and price tables into an integer
total. One implementation per shape, selected by type:

    shape = build_shape(request)
    total = calculate_price(shape, tables)

Toddlers never incur a surcharge. ``empty`` is the nightly rate of an
unoccupied room and guest surcharges are added on top of it.
"""

from dataclasses import dataclass
from functools import singledispatch
from typing import Iterable

from shared.domain.base import ValueObject

from .shapes import (
    BookingRequest,
    BulkShape,
    CompositeShape,
    PerGuestShape,
    PricedRoom,
    SimpleShape,
    build_shape,
)
from .tables import GuestTier, PersonType, PriceTables, RoomSize


@dataclass(frozen=True)
class PriceQuote(ValueObject):
    total: int
    strategy: str

    def to_dict(self) -> dict:
        return {'total': self.total, 'strategy': self.strategy}


def surcharge_size(rooms: Iterable[PricedRoom]) -> RoomSize:
    """Room size used for guests not tied to a specific room"""
    sizes = {room.size for room in rooms}
    if len(sizes) == 1:
        return sizes.pop()
    return RoomSize.SMALL


@singledispatch
def calculate_price(shape, tables: PriceTables) -> int:
    raise TypeError(f"Unknown booking shape: {type(shape).__name__}")


@calculate_price.register
def _(shape: BulkShape, tables: PriceTables) -> int:
    bulk = tables.bulk_rate()
    per_night = (
        bulk.base
        + bulk.adult[shape.tier] * shape.counts.adults
        + bulk.child[shape.tier] * shape.counts.children
    )
    return per_night * shape.nights


@calculate_price.register
def _(shape: SimpleShape, tables: PriceTables) -> int:
    per_night = sum(tables.room_rate(shape.tier, room.size).empty for room in shape.rooms)
    guest_rate = tables.room_rate(shape.tier, surcharge_size(shape.rooms))
    per_night += guest_rate.adult * shape.counts.adults
    per_night += guest_rate.child * shape.counts.children
    return per_night * shape.nights


@calculate_price.register
def _(shape: PerGuestShape, tables: PriceTables) -> int:
    rooms_by_id = {room.room_id: room for room in shape.rooms}
    unassigned_resident = any(
        g.room_id is None and g.price_tier is GuestTier.RESIDENT for g in shape.guests
    )

    per_night = 0
    for room in shape.rooms:
        resident_here = unassigned_resident or any(
            g.room_id == room.room_id and g.price_tier is GuestTier.RESIDENT
            for g in shape.guests
        )
        room_tier = GuestTier.RESIDENT if resident_here else GuestTier.EXTERNAL
        per_night += tables.room_rate(room_tier, room.size).empty

    fallback_size = surcharge_size(shape.rooms)
    for guest in shape.guests:
        if guest.person_type is PersonType.TODDLER:
            continue
        room = rooms_by_id.get(guest.room_id) if guest.room_id else None
        size = room.size if room is not None else fallback_size
        per_night += tables.room_rate(guest.price_tier, size).surcharge(guest.person_type)

    return per_night * shape.nights


@calculate_price.register
def _(shape: CompositeShape, tables: PriceTables) -> int:
    return sum(calculate_price(part, tables) for part in shape.parts)


def strategy_name(shape) -> str:
    return {
        BulkShape: 'bulk',
        CompositeShape: 'composite',
        PerGuestShape: 'per_guest',
        SimpleShape: 'simple',
    }[type(shape)]


def price_request(request: BookingRequest, tables: PriceTables) -> PriceQuote:
    """Entry point used by both the preview and the commit path"""
    shape = build_shape(request)
    return PriceQuote(total=calculate_price(shape, tables), strategy=strategy_name(shape))
