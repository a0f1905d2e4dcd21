"""
Reservation Hold Manager

Use cases that claim or release room-nights:
- create_hold / delete_hold / delete_session_holds: temporary holds
- commit_booking: hold (or direct request) -> confirmed booking
- update_booking / delete_booking: self-service changes via edit token
- expire_holds: housekeeping sweep

Every write runs in one DjangoUnitOfWork: lock the rooms, re-check every
night inside the same transaction, then write. The RoomNight unique
constraint backs the check, so a commit that slips past it fails on
insert instead of double-booking.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence
import logging
import secrets

from django.conf import settings
from django.db import IntegrityError, OperationalError
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import (
    BookingNotFound,
    EditTokenMismatch,
    HoldOwnershipError,
    InvalidBookingRequest,
    InvalidDateRange,
    RoomUnavailable,
)
from apps.bookings.domain.christmas import ChristmasRules
from apps.bookings.domain.events import (
    BookingCommitted,
    BookingDeleted,
    BookingUpdated,
    HoldCreated,
    HoldReleased,
)
from apps.bookings.models import Booking, BookingGuest, BookingRoom, ProposedBooking, RoomNight
from apps.bookings.services import _lock_queryset_if_possible, ensure_nights_free, lock_rooms
from apps.pricing.domain.shapes import BookingRequest, build_shape
from apps.pricing.services import display_price, quote

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class ContactDetails:
    """Who booked; not used for availability or pricing"""
    name: str
    email: str
    phone: str = ''
    notes: str = ''


def hold_ttl() -> timedelta:
    return timedelta(minutes=getattr(settings, 'HOLD_TTL_MINUTES', 15))


def christmas_rules() -> ChristmasRules:
    return ChristmasRules.from_config(
        getattr(settings, 'CHRISTMAS_PERIODS', ()),
        getattr(settings, 'CHRISTMAS_ACCESS_CODES', ()),
        resident_room_limit=getattr(settings, 'CHRISTMAS_RESIDENT_ROOM_LIMIT', 2),
    )


class HoldManager:
    """
    Handler for every operation that claims or releases room-nights

    Strategy for commits:
    1. Start database transaction (atomic)
    2. Lock the affected room rows (SELECT FOR UPDATE where supported)
    3. Re-check every requested night, ignoring superseded holds
    4. Compute the authoritative price
    5. Insert booking, rooms, roster and RoomNight ledger rows
    6. Delete superseded holds
    7. Commit, then publish events
    A lock/serialization failure is retried once from step 1.
    """

    def __init__(self, now=None):
        # Optional clock override used by tests
        self._now = now

    def now(self) -> datetime:
        return self._now() if callable(self._now) else (self._now or timezone.now())

    # ----- holds -----

    def create_hold(
        self,
        session_id: str,
        request: BookingRequest,
        christmas_code: Optional[str] = None,
    ) -> ProposedBooking:
        """
        Place a hold on the request's rooms for ``HOLD_TTL_MINUTES``

        The hold covers the request's overall date range for every room.

        Raises:
            RoomUnavailable: any of those nights is already claimed
            InvalidBookingRequest / InvalidDateRange / GuestCountMismatch:
                malformed request
            ChristmasAccessDenied / ChristmasRuleViolation: see ``christmas_rules``
        """
        if not session_id:
            raise InvalidBookingRequest("A session id is required to hold rooms", field='session')

        build_shape(request)
        dates = request.envelope()
        now = self.now()
        self._check_booking_window(dates, now.date())
        christmas_rules().check(request, now.date(), christmas_code)

        logger.info(
            f"Creating hold for session {session_id}, rooms {', '.join(request.room_ids)}, dates {dates}"
        )

        # Display context: unusable tables give a zero preview, not an error
        preview = display_price(request, 0)

        with DjangoUnitOfWork() as uow:
            rooms = self._lock_known_rooms(request.room_ids)
            ensure_nights_free({room_id: dates for room_id in rooms}, now=now)

            hold = ProposedBooking.objects.create(
                session_id=session_id,
                start_date=dates.start_date,
                end_date=dates.end_date,
                guest_tier=request.tier.value,
                is_bulk=request.is_bulk,
                adults=request.counts.adults,
                children=request.counts.children,
                toddlers=request.counts.toddlers,
                total_price=preview,
                created_at=now,
                expires_at=now + hold_ttl(),
            )
            hold.rooms.set(rooms.values())

            uow.add_event(HoldCreated(
                aggregate_id=hold.proposal_id,
                session_id=session_id,
                dates=dates,
                room_ids=tuple(rooms),
                expires_at=hold.expires_at,
            ))

        logger.info(f"Hold {hold.proposal_id} created, expires at {hold.expires_at.isoformat()}")
        return hold

    def delete_hold(self, proposal_id: str, session_id: Optional[str]) -> bool:
        """
        Remove a hold. Idempotent: a missing or already expired hold is not an error.

        Raises:
            HoldOwnershipError: no session given, or the hold belongs to another session
        """
        if not session_id:
            raise HoldOwnershipError(
                "A session id is required to delete a hold",
                details={'proposal_id': proposal_id},
            )

        with DjangoUnitOfWork() as uow:
            hold = ProposedBooking.objects.filter(pk=proposal_id).first()
            if hold is None:
                return False
            if hold.session_id != session_id:
                raise HoldOwnershipError(
                    f"Hold {proposal_id} belongs to another session",
                    details={'proposal_id': proposal_id},
                )
            hold.delete()
            uow.add_event(HoldReleased(aggregate_id=proposal_id, proposal_ids=(proposal_id,)))

        logger.info(f"Hold {proposal_id} deleted")
        return True

    def delete_session_holds(self, session_id: str) -> int:
        """Drop every hold of a session (the guest left the booking flow)"""
        with DjangoUnitOfWork() as uow:
            holds = ProposedBooking.objects.filter(session_id=session_id)
            proposal_ids = tuple(holds.values_list('proposal_id', flat=True))
            if proposal_ids:
                holds.delete()
                uow.add_event(HoldReleased(aggregate_id=session_id, proposal_ids=proposal_ids))

        if proposal_ids:
            logger.info(f"Deleted {len(proposal_ids)} hold(s) of session {session_id}")
        return len(proposal_ids)

    def session_holds(self, session_id: str) -> List[ProposedBooking]:
        return list(
            ProposedBooking.objects.live(self.now())
            .filter(session_id=session_id)
            .prefetch_related('rooms')
        )

    def expire_holds(self, now: Optional[datetime] = None) -> int:
        """
        Physically delete holds whose ``expires_at`` has passed

        Housekeeping only: the resolver already ignores them.
        """
        now = now or self.now()
        with DjangoUnitOfWork() as uow:
            expired = ProposedBooking.objects.expired(now)
            proposal_ids = tuple(expired.values_list('proposal_id', flat=True))
            if proposal_ids:
                expired.delete()
                uow.add_event(HoldReleased(proposal_ids=proposal_ids, reason='expired'))

        if proposal_ids:
            logger.info(f"Expired {len(proposal_ids)} hold(s)")
        return len(proposal_ids)

    # ----- confirmed bookings -----

    def commit_booking(
        self,
        proposal_ids: Sequence[str],
        request: BookingRequest,
        contact: ContactDetails,
        session_id: Optional[str] = None,
        christmas_code: Optional[str] = None,
    ) -> Booking:
        """
        Turn holds (or a direct request) into a confirmed booking, atomically

        On conflict nothing is written and the holds stay in place.
        Superseding holds needs the session that placed them.

        Raises:
            RoomUnavailable: a requested night is claimed by someone else
            InvalidPriceConfiguration: price tables are unusable
            HoldOwnershipError: holds given without a session, or a
                superseded hold belongs to another session
        """
        proposal_ids = tuple(dict.fromkeys(proposal_ids))
        if proposal_ids and not session_id:
            raise HoldOwnershipError(
                "A session id is required to commit holds",
                details={'proposal_ids': list(proposal_ids)},
            )

        build_shape(request)
        today = self.now().date()
        self._check_booking_window(request.envelope(), today)
        christmas_rules().check(request, today, christmas_code)
        return self._with_retry(
            'commit',
            lambda: self._commit_once(proposal_ids, request, contact, session_id),
        )

    def update_booking(
        self,
        code: str,
        edit_token: Optional[str],
        request: BookingRequest,
        contact: Optional[ContactDetails] = None,
        admin: bool = False,
        christmas_code: Optional[str] = None,
    ) -> Booking:
        """
        Change a confirmed booking through the same validate-then-commit path

        The booking's own nights do not conflict with themselves. Admins
        may move a booking outside the booking window and the Christmas rules.
        """
        build_shape(request)
        if not admin:
            today = self.now().date()
            self._check_booking_window(request.envelope(), today)
            christmas_rules().check(request, today, christmas_code)
        return self._with_retry(
            'update',
            lambda: self._update_once(code, edit_token, request, contact, admin),
        )

    def get_booking(self, code: str, edit_token: Optional[str] = None, admin: bool = False) -> Booking:
        """Load a booking for self-service viewing. Raises BookingNotFound or EditTokenMismatch"""
        return self._get_authorized_booking(code, edit_token, admin)

    def delete_booking(self, code: str, edit_token: Optional[str] = None, admin: bool = False) -> None:
        with DjangoUnitOfWork() as uow:
            booking = self._get_authorized_booking(code, edit_token, admin)
            booking.delete()
            uow.add_event(BookingDeleted(aggregate_id=code, by_admin=admin))

        logger.info(f"Booking {code} deleted{' by admin' if admin else ''}")

    # ----- internals -----

    def _with_retry(self, operation: str, attempt):
        """
        Run ``attempt`` and retry it once on a lock/serialization failure

        The retry repeats the whole transaction, re-validation included.
        """
        try:
            return attempt()
        except OperationalError as e:
            logger.warning(f"Transaction conflict during {operation}, retrying once: {e}")
        try:
            return attempt()
        except OperationalError as e:
            logger.error(f"Transaction conflict during {operation} after retry: {e}")
            raise RoomUnavailable("The rooms are being booked by someone else, please try again") from e

    def _commit_once(
        self,
        proposal_ids: Sequence[str],
        request: BookingRequest,
        contact: ContactDetails,
        session_id: Optional[str],
    ) -> Booking:
        now = self.now()
        try:
            with DjangoUnitOfWork() as uow:
                self._lock_known_rooms(request.room_ids)

                holds = list(ProposedBooking.objects.filter(pk__in=proposal_ids))
                foreign = [hold.pk for hold in holds if not session_id or hold.session_id != session_id]
                if foreign:
                    raise HoldOwnershipError(
                        "Some holds belong to another session",
                        details={'proposal_ids': foreign},
                    )

                ensure_nights_free(request.room_ranges(), now=now, exclude_proposals=proposal_ids)
                price = quote(request)

                dates = request.envelope()
                booking = Booking.objects.create(
                    guest_tier=request.tier.value,
                    is_bulk=request.is_bulk,
                    start_date=dates.start_date,
                    end_date=dates.end_date,
                    name=contact.name,
                    email=contact.email,
                    phone=contact.phone,
                    notes=contact.notes,
                    adults=request.counts.adults,
                    children=request.counts.children,
                    toddlers=request.counts.toddlers,
                    total_price=price.total,
                )
                self._write_claims(booking, request)

                superseded = tuple(hold.pk for hold in holds)
                if superseded:
                    ProposedBooking.objects.filter(pk__in=superseded).delete()
                    uow.add_event(HoldReleased(proposal_ids=superseded, reason='committed'))

                uow.add_event(BookingCommitted(
                    aggregate_id=booking.code,
                    dates=dates,
                    room_ids=request.room_ids,
                    total_price=price.total,
                    superseded_holds=superseded,
                ))
        except IntegrityError as e:
            logger.warning(f"Room-night ledger rejected commit for rooms {', '.join(request.room_ids)}: {e}")
            raise RoomUnavailable("The selected nights were just booked by someone else") from e

        logger.info(
            f"Booking {booking.code} committed: rooms {', '.join(request.room_ids)}, "
            f"dates {dates}, total {price.total} ({price.strategy})"
        )
        return booking

    def _update_once(
        self,
        code: str,
        edit_token: Optional[str],
        request: BookingRequest,
        contact: Optional[ContactDetails],
        admin: bool,
    ) -> Booking:
        now = self.now()
        try:
            with DjangoUnitOfWork() as uow:
                booking = self._get_authorized_booking(code, edit_token, admin)
                self._lock_known_rooms(request.room_ids)

                ensure_nights_free(request.room_ranges(), now=now, exclude_booking=booking.code)
                price = quote(request)

                booking.room_stays.all().delete()
                booking.guests.all().delete()
                booking.nights.all().delete()

                dates = request.envelope()
                booking.guest_tier = request.tier.value
                booking.is_bulk = request.is_bulk
                booking.start_date = dates.start_date
                booking.end_date = dates.end_date
                booking.adults = request.counts.adults
                booking.children = request.counts.children
                booking.toddlers = request.counts.toddlers
                booking.total_price = price.total
                if contact is not None:
                    booking.name = contact.name
                    booking.email = contact.email
                    booking.phone = contact.phone
                    booking.notes = contact.notes
                booking.save()
                self._write_claims(booking, request)

                uow.add_event(BookingUpdated(
                    aggregate_id=booking.code,
                    dates=dates,
                    room_ids=request.room_ids,
                    total_price=price.total,
                ))
        except IntegrityError as e:
            logger.warning(f"Room-night ledger rejected update of {code}: {e}")
            raise RoomUnavailable("The selected nights were just booked by someone else") from e

        logger.info(f"Booking {code} updated: dates {dates}, total {price.total}")
        return booking

    def _write_claims(self, booking: Booking, request: BookingRequest) -> None:
        stays = []
        nights = []
        for rr in request.rooms:
            dates = request.range_for(rr)
            counts = rr.counts
            stays.append(BookingRoom(
                booking=booking,
                room_id=rr.room.room_id,
                start_date=dates.start_date,
                end_date=dates.end_date,
                adults=counts.adults if counts else None,
                children=counts.children if counts else None,
                toddlers=counts.toddlers if counts else None,
            ))
            nights.extend(
                RoomNight(room_id=rr.room.room_id, night=night, booking=booking)
                for night in dates.nights()
            )
        BookingRoom.objects.bulk_create(stays)
        BookingGuest.objects.bulk_create([
            BookingGuest(
                booking=booking,
                name=guest.name,
                person_type=guest.person_type.value,
                price_tier=guest.price_tier.value,
                room_id=guest.room_id,
                position=position,
            )
            for position, guest in enumerate(request.roster)
        ])
        RoomNight.objects.bulk_create(nights)

    def _get_authorized_booking(self, code: str, edit_token: Optional[str], admin: bool) -> Booking:
        booking = _lock_queryset_if_possible(Booking.objects.filter(pk=code)).first()
        if booking is None:
            raise BookingNotFound(f"Booking {code} does not exist")
        if admin:
            return booking
        if not (edit_token and secrets.compare_digest(edit_token.encode(), booking.edit_token.encode())):
            raise EditTokenMismatch("The edit token does not match this booking")
        return booking

    def _lock_known_rooms(self, room_ids: Iterable[str]):
        requested = list(room_ids)
        rooms = lock_rooms(requested)
        missing = sorted(set(requested) - set(rooms))
        if missing:
            raise InvalidBookingRequest(f"Unknown rooms: {', '.join(missing)}", field='rooms')
        return rooms

    def _check_booking_window(self, dates, today: date) -> None:
        if dates.start_date < today:
            raise InvalidDateRange("Bookings cannot start in the past")
        max_days = getattr(settings, 'CHALET_MAX_ADVANCE_DAYS', None)
        if max_days and dates.end_date > today + timedelta(days=max_days):
            raise InvalidDateRange(f"Bookings can be made at most {max_days} days in advance")


hold_manager = HoldManager()
