"""Price table storage and the pricing entry points used by the API and hold manager."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import InvalidBookingRequest, InvalidPriceConfiguration
from shared.domain.value_objects import DateRange

from apps.rooms.models import Room

from .domain.calculator import PriceQuote, price_request
from .domain.shapes import BookingRequest, GuestCounts, PricedRoom, RoomRequest, RosterGuest
from .domain.tables import DEFAULT_PRICE_TABLES, GuestTier, PersonType, PriceTables, RoomSize
from .models import BulkRate, RoomRate

logger = logging.getLogger(__name__)


def stored_price_tables_data() -> dict:
    """Raw table content as stored, without validation."""

    data: dict = {}
    for rate in RoomRate.objects.all():
        data.setdefault(rate.guest_tier, {})[rate.room_size] = {
            "empty": rate.empty_price,
            "adult": rate.adult_price,
            "child": rate.child_price,
        }
    bulk = BulkRate.objects.order_by("pk").first()
    if bulk is not None:
        data["bulk"] = {
            "base": bulk.base_price,
            "resident": {"adult": bulk.resident_adult_price, "child": bulk.resident_child_price},
            "external": {"adult": bulk.external_adult_price, "child": bulk.external_child_price},
        }
    return data


def load_price_tables() -> PriceTables:
    """
    Load and validate the current tables.

    Raises InvalidPriceConfiguration when a tier/size combination is
    missing or a value is negative.
    """

    return PriceTables.from_dict(stored_price_tables_data())


def replace_price_tables(data: Mapping[str, Any]) -> PriceTables:
    """Validate ``data`` and swap it in for the stored tables in one transaction."""

    tables = PriceTables.from_dict(data)

    with DjangoUnitOfWork():
        RoomRate.objects.all().delete()
        RoomRate.objects.bulk_create(
            [
                RoomRate(
                    guest_tier=tier.value,
                    room_size=size.value,
                    empty_price=rate.empty,
                    adult_price=rate.adult,
                    child_price=rate.child,
                )
                for (tier, size), rate in tables.room_rates.items()
            ]
        )
        BulkRate.objects.all().delete()
        if tables.bulk is not None:
            BulkRate.objects.create(
                base_price=tables.bulk.base,
                resident_adult_price=tables.bulk.adult[GuestTier.RESIDENT],
                resident_child_price=tables.bulk.child[GuestTier.RESIDENT],
                external_adult_price=tables.bulk.adult[GuestTier.EXTERNAL],
                external_child_price=tables.bulk.child[GuestTier.EXTERNAL],
            )

    logger.info("Price tables replaced")
    return tables


def seed_default_price_tables() -> int:
    """Create default rate rows that are missing. Returns how many rows were created."""

    created = 0
    for tier, by_size in DEFAULT_PRICE_TABLES.items():
        if tier == "bulk":
            continue
        for size, card in by_size.items():
            _, was_created = RoomRate.objects.get_or_create(
                guest_tier=tier,
                room_size=size,
                defaults={
                    "empty_price": card["empty"],
                    "adult_price": card["adult"],
                    "child_price": card["child"],
                },
            )
            created += int(was_created)

    if not BulkRate.objects.exists():
        bulk = DEFAULT_PRICE_TABLES["bulk"]
        BulkRate.objects.create(
            base_price=bulk["base"],
            resident_adult_price=bulk["resident"]["adult"],
            resident_child_price=bulk["resident"]["child"],
            external_adult_price=bulk["external"]["adult"],
            external_child_price=bulk["external"]["child"],
        )
        created += 1
    return created


def _counts(data: Mapping[str, Any]) -> GuestCounts:
    return GuestCounts(
        adults=int(data.get("adults") or 0),
        children=int(data.get("children") or 0),
        toddlers=int(data.get("toddlers") or 0),
    )


def make_booking_request(data: Mapping[str, Any]) -> BookingRequest:
    """
    Turn validated booking input into a domain ``BookingRequest``.

    Expected keys: ``start_date``, ``end_date``, ``guest_tier``, ``is_bulk``,
    ``rooms`` (list of ``{"room", "start_date"?, "end_date"?, "adults"?, ...}``),
    ``adults``/``children``/``toddlers`` and ``guests`` (the roster).
    A bulk request always covers every room of the chalet.
    """

    dates = DateRange.parse(data.get("start_date"), data.get("end_date"))
    try:
        tier = GuestTier(data.get("guest_tier") or GuestTier.EXTERNAL.value)
    except ValueError:
        raise InvalidBookingRequest(f"Unknown guest tier {data.get('guest_tier')!r}", field="guest_tier") from None
    is_bulk = bool(data.get("is_bulk"))

    if is_bulk:
        room_entries = [{"room": room_id} for room_id in Room.objects.values_list("id", flat=True)]
    else:
        room_entries = list(data.get("rooms") or [])

    room_ids = [str(entry["room"]) for entry in room_entries]
    rooms = Room.objects.in_bulk(room_ids)
    missing = sorted(set(room_ids) - set(rooms))
    if missing:
        raise InvalidBookingRequest(f"Unknown rooms: {', '.join(missing)}", field="rooms")

    room_requests = []
    for entry in room_entries:
        room = rooms[str(entry["room"])]
        room_dates = None
        if entry.get("start_date") and entry.get("end_date"):
            room_dates = DateRange.parse(entry["start_date"], entry["end_date"])
        room_counts = None
        if not is_bulk and any(entry.get(key) is not None for key in ("adults", "children", "toddlers")):
            room_counts = _counts(entry)
        room_requests.append(
            RoomRequest(
                room=PricedRoom(room_id=room.id, size=RoomSize(room.size), beds=room.beds),
                dates=room_dates,
                counts=room_counts,
            )
        )

    roster = []
    for guest in data.get("guests") or []:
        try:
            roster.append(
                RosterGuest(
                    name=guest.get("name", ""),
                    person_type=PersonType(guest["person_type"]),
                    price_tier=GuestTier(guest.get("price_tier") or tier.value),
                    room_id=str(guest["room"]) if guest.get("room") else None,
                )
            )
        except (KeyError, ValueError) as exc:
            raise InvalidBookingRequest(f"Malformed guest entry: {exc}", field="guests") from exc

    return BookingRequest(
        dates=dates,
        tier=tier,
        rooms=tuple(room_requests),
        counts=_counts(data),
        roster=tuple(roster),
        is_bulk=is_bulk,
    )


def quote(request: BookingRequest) -> PriceQuote:
    """Authoritative price. Raises InvalidPriceConfiguration if the tables are unusable."""

    return price_request(request, load_price_tables())


def display_price(request: BookingRequest, stored_price: int) -> int:
    """Price for display contexts, falling back to ``stored_price`` when tables are unusable."""

    try:
        return quote(request).total
    except InvalidPriceConfiguration as exc:
        logger.warning("Price tables unusable, showing stored price %s: %s", stored_price, exc.message)
        return stored_price
