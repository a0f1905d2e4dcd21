"""
Common Value Objects

Value objects used across the booking contexts:
- DateRange: a half-open range of calendar dates (check-in to check-out)

Occupancy is defined on nights, not dates. A night is identified by the
date it starts on, so the range [1st, 3rd) covers the nights starting on
the 1st and the 2nd. The checkout date is never an occupied night, which
is what allows back-to-back stays.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from shared.domain.base import InvalidDateRange, ValueObject


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    A range always covers at least one night.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if not isinstance(self.start_date, date) or not isinstance(self.end_date, date):
            raise InvalidDateRange("Start and end must be calendar dates")
        if self.start_date >= self.end_date:
            raise InvalidDateRange(
                f"Start date ({self.start_date}) must be before end date ({self.end_date})"
            )

    @classmethod
    def parse(cls, start: str | date, end: str | date) -> 'DateRange':
        """Build a range from ISO strings or dates, rejecting garbage."""
        try:
            start_date = start if isinstance(start, date) else date.fromisoformat(str(start))
            end_date = end if isinstance(end, date) else date.fromisoformat(str(end))
        except ValueError as exc:
            raise InvalidDateRange(f"Malformed date: {exc}") from exc
        return cls(start_date, end_date)

    def contains_night(self, night: date) -> bool:
        """Is the night starting on ``night`` inside this range"""
        return self.start_date <= night < self.end_date

    def nights(self) -> Iterator[date]:
        """Yield the starting date of every night in the range"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def envelope(self, other: 'DateRange') -> 'DateRange':
        return DateRange(
            min(self.start_date, other.start_date),
            max(self.end_date, other.end_date),
        )

    @property
    def night_count(self) -> int:
        return (self.end_date - self.start_date).days

    def __len__(self) -> int:
        """Number of nights in this range"""
        return self.night_count

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
