"""
Base Domain Classes

This module provides the foundational building blocks shared by every
booking context:
- ValueObject: Immutable objects compared by value
- DomainEvent: Events that represent something that happened
- BookingError family: the domain error taxonomy surfaced to callers
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    They are published on the message bus after the transaction commits.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: str = None

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id,
        }


# ===== Error taxonomy =====

class BookingError(Exception):
    """
    Base class for all domain errors

    Every error carries a stable machine-readable ``code`` and an HTTP
    status so the API layer can render it without knowing the concrete type.
    """
    code = 'booking_error'
    status_code = 500

    def __init__(self, message: str = '', *, field: str | None = None, details: dict | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.field = field
        self.details = details or {}

    def to_dict(self) -> dict:
        data = {'code': self.code, 'detail': self.message}
        if self.field:
            data['field'] = self.field
        if self.details:
            data['details'] = self.details
        return data


class BookingConflictError(BookingError):
    """Requested room-nights are occupied (user picks other dates/rooms)."""
    code = 'conflict'
    status_code = 409


class BookingValidationError(BookingError):
    """Input rejected before touching the store (user fixes a form field)."""
    code = 'validation_error'
    status_code = 400


class RoomUnavailable(BookingConflictError):
    """A requested room-night is already claimed at check or commit time"""
    code = 'room_unavailable'


class InvalidDateRange(BookingValidationError):
    """Non-positive night count or malformed dates"""
    code = 'invalid_date_range'

    def __init__(self, message: str = '', **kwargs):
        kwargs.setdefault('field', 'dates')
        super().__init__(message, **kwargs)


class GuestCountMismatch(BookingValidationError):
    """Roster size disagrees with the declared adult/child/toddler counts"""
    code = 'guest_count_mismatch'

    def __init__(self, message: str = '', **kwargs):
        kwargs.setdefault('field', 'guests')
        super().__init__(message, **kwargs)


class RoomCapacityExceeded(BookingValidationError):
    """More paying guests assigned to a room than it has beds"""
    code = 'room_capacity_exceeded'

    def __init__(self, message: str = '', **kwargs):
        kwargs.setdefault('field', 'guests')
        super().__init__(message, **kwargs)


class InvalidBookingRequest(BookingValidationError):
    """Structurally invalid booking shape (unknown rooms, empty room list...)"""
    code = 'invalid_booking_request'


class ChristmasAccessDenied(BookingValidationError):
    """Christmas-period booking before the cutoff without a valid access code"""
    code = 'christmas_code_invalid'

    def __init__(self, message: str = '', **kwargs):
        kwargs.setdefault('field', 'christmas_code')
        super().__init__(message, **kwargs)


class ChristmasRuleViolation(BookingValidationError):
    """Christmas-period booking shape not allowed (room limit, whole-chalet)"""
    code = 'christmas_rule_violation'


class InvalidPriceConfiguration(BookingError):
    """Price tables are missing tier/size entries or contain negative values"""
    code = 'invalid_price_configuration'
    status_code = 503


class HoldOwnershipError(BookingError):
    """A session tried to cancel a hold it does not own"""
    code = 'hold_not_owned'
    status_code = 403


class EditTokenMismatch(BookingError):
    """Self-service change attempted with a wrong edit token"""
    code = 'edit_token_mismatch'
    status_code = 403


class BookingNotFound(BookingError):
    code = 'not_found'
    status_code = 404
