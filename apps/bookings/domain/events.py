"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Tuple

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


# ===== Hold Events =====

@dataclass
class HoldCreated(DomainEvent):
    """
    Event: A session placed a hold on room-nights

    The hold stops counting at ``expires_at`` even if nobody deletes it.
    """
    session_id: str = ''
    dates: DateRange = None
    room_ids: Tuple[str, ...] = ()
    expires_at: datetime = None


@dataclass
class HoldReleased(DomainEvent):
    """
    Event: Holds were removed

    Reasons: ``cancelled`` (explicit delete), ``committed`` (superseded by
    a confirmed booking) or ``expired`` (sweep).
    """
    proposal_ids: Tuple[str, ...] = ()
    reason: str = 'cancelled'


# ===== Booking Events =====

@dataclass
class BookingCommitted(DomainEvent):
    """
    Event: A confirmed booking was created

    Triggers (outside this service):
    - Confirmation email with the edit link
    - Admin notification
    """
    dates: DateRange = None
    room_ids: Tuple[str, ...] = ()
    total_price: int = 0
    superseded_holds: Tuple[str, ...] = field(default_factory=tuple)


@dataclass
class BookingUpdated(DomainEvent):
    dates: DateRange = None
    room_ids: Tuple[str, ...] = ()
    total_price: int = 0


@dataclass
class BookingDeleted(DomainEvent):
    """Event: A confirmed booking was deleted and its nights released"""
    by_admin: bool = False
