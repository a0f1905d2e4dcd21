"""
Christmas Period Rules

The Christmas weeks are allocated in two phases, split by September 30
of the year the period starts in:

- up to the cutoff only guests with an access code may book, and a
  resident booking may take at most ``resident_room_limit`` rooms
- after the cutoff anyone may book single rooms, but the whole chalet
  cannot be booked

A booking falls under the rules when any of its nights lies inside a
period. Period dates are inclusive on both ends.
"""

from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, Iterable, Optional, Tuple

from shared.domain.base import ChristmasAccessDenied, ChristmasRuleViolation, InvalidDateRange, ValueObject
from shared.domain.value_objects import DateRange
from apps.pricing.domain.shapes import BookingRequest
from apps.pricing.domain.tables import GuestTier

CUTOFF_MONTH = 9
CUTOFF_DAY = 30


@dataclass(frozen=True)
class ChristmasPeriod(ValueObject):
    """First and last day of a Christmas period, both inclusive"""
    first_day: date
    last_day: date

    def __post_init__(self):
        if self.last_day < self.first_day:
            raise InvalidDateRange(f"Christmas period ends ({self.last_day}) before it starts ({self.first_day})")

    @classmethod
    def parse(cls, first: str | date, last: str | date) -> 'ChristmasPeriod':
        try:
            first_day = first if isinstance(first, date) else date.fromisoformat(str(first).strip())
            last_day = last if isinstance(last, date) else date.fromisoformat(str(last).strip())
        except ValueError as exc:
            raise InvalidDateRange(f"Malformed Christmas period: {exc}") from exc
        return cls(first_day, last_day)

    @property
    def cutoff(self) -> date:
        """Last day of the access-code phase"""
        return date(self.first_day.year, CUTOFF_MONTH, CUTOFF_DAY)

    def covers(self, dates: DateRange) -> bool:
        return dates.start_date <= self.last_day and dates.end_date > self.first_day

    def __str__(self):
        return f"{self.first_day.isoformat()} - {self.last_day.isoformat()}"


@dataclass(frozen=True)
class ChristmasRules(ValueObject):
    periods: Tuple[ChristmasPeriod, ...] = ()
    access_codes: FrozenSet[str] = frozenset()
    resident_room_limit: int = 2

    @classmethod
    def from_config(cls, periods: Iterable, access_codes: Iterable[str] = (), **kwargs) -> 'ChristmasRules':
        """Build rules from ``(first, last)`` pairs and a list of codes"""
        return cls(
            periods=tuple(ChristmasPeriod.parse(first, last) for first, last in periods),
            access_codes=frozenset(code.strip() for code in access_codes if code.strip()),
            **kwargs,
        )

    def period_for(self, dates: DateRange) -> Optional[ChristmasPeriod]:
        for period in self.periods:
            if period.covers(dates):
                return period
        return None

    def code_is_valid(self, access_code: Optional[str]) -> bool:
        return bool(access_code) and access_code.strip() in self.access_codes

    def check(self, request: BookingRequest, today: date, access_code: Optional[str] = None) -> None:
        """
        Raise if ``request``, made on ``today``, breaks the Christmas rules

        Raises:
            ChristmasAccessDenied: missing or unknown code before the cutoff
            ChristmasRuleViolation: too many resident rooms before the
                cutoff, or a whole-chalet booking after it
        """
        period = self.period_for(request.envelope())
        if period is None:
            return

        if today > period.cutoff:
            if request.is_bulk:
                raise ChristmasRuleViolation(
                    f"The whole chalet cannot be booked for Christmas ({period}) after {period.cutoff}",
                    field='is_bulk',
                )
            return

        if not self.code_is_valid(access_code):
            raise ChristmasAccessDenied(
                f"Christmas bookings ({period}) need a valid access code until {period.cutoff}"
            )
        if (
            not request.is_bulk
            and request.tier is GuestTier.RESIDENT
            and len(request.rooms) > self.resident_room_limit
        ):
            raise ChristmasRuleViolation(
                f"Resident guests may book at most {self.resident_room_limit} rooms "
                f"for Christmas until {period.cutoff}",
                field='rooms',
                details={'limit': self.resident_room_limit, 'requested': len(request.rooms)},
            )
