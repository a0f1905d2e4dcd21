from datetime import date

import pytest

from apps.bookings.domain.christmas import ChristmasPeriod, ChristmasRules
from apps.pricing.domain.shapes import BookingRequest, GuestCounts, PricedRoom, RoomRequest
from apps.pricing.domain.tables import GuestTier, RoomSize
from shared.domain.base import ChristmasAccessDenied, ChristmasRuleViolation, InvalidDateRange
from shared.domain.value_objects import DateRange

ROOMS = tuple(PricedRoom(room_id, RoomSize.SMALL, beds=3) for room_id in ("12", "13", "14"))
BEFORE_CUTOFF = date(2030, 9, 30)
AFTER_CUTOFF = date(2030, 10, 1)


@pytest.fixture
def rules():
    return ChristmasRules.from_config([("2030-12-23", "2031-01-02")], [" XMAS2030 ", ""])


def _request(start, end, rooms=1, tier=GuestTier.RESIDENT, is_bulk=False):
    return BookingRequest(
        dates=DateRange(start, end),
        tier=tier,
        rooms=tuple(RoomRequest(room) for room in ROOMS[:rooms]),
        counts=GuestCounts(adults=rooms),
        is_bulk=is_bulk,
    )


def test_period_is_inclusive_on_both_ends(rules):
    period = rules.periods[0]

    assert period.covers(DateRange(date(2031, 1, 2), date(2031, 1, 3)))
    assert period.covers(DateRange(date(2030, 12, 20), date(2030, 12, 24)))
    assert not period.covers(DateRange(date(2030, 12, 20), date(2030, 12, 23)))
    assert not period.covers(DateRange(date(2031, 1, 3), date(2031, 1, 5)))


def test_cutoff_is_september_30_of_the_start_year(rules):
    assert rules.periods[0].cutoff == date(2030, 9, 30)


def test_code_required_up_to_cutoff(rules):
    request = _request(date(2030, 12, 24), date(2030, 12, 27))

    with pytest.raises(ChristmasAccessDenied) as exc:
        rules.check(request, BEFORE_CUTOFF)
    with pytest.raises(ChristmasAccessDenied):
        rules.check(request, BEFORE_CUTOFF, "xmas2030")

    assert exc.value.field == "christmas_code"
    rules.check(request, BEFORE_CUTOFF, "XMAS2030")


def test_bookings_outside_periods_are_untouched(rules):
    rules.check(_request(date(2030, 12, 10), date(2030, 12, 23), is_bulk=True), AFTER_CUTOFF)
    rules.check(_request(date(2030, 12, 10), date(2030, 12, 12), rooms=3), BEFORE_CUTOFF)


def test_resident_room_limit_applies_before_cutoff_only(rules):
    three_rooms = _request(date(2030, 12, 24), date(2030, 12, 26), rooms=3)

    with pytest.raises(ChristmasRuleViolation) as exc:
        rules.check(three_rooms, BEFORE_CUTOFF, "XMAS2030")

    assert exc.value.field == "rooms"
    assert exc.value.details == {"limit": 2, "requested": 3}
    rules.check(_request(date(2030, 12, 24), date(2030, 12, 26), rooms=2), BEFORE_CUTOFF, "XMAS2030")
    rules.check(three_rooms, AFTER_CUTOFF)


def test_external_guests_have_no_room_limit(rules):
    request = _request(date(2030, 12, 24), date(2030, 12, 26), rooms=3, tier=GuestTier.EXTERNAL)

    rules.check(request, BEFORE_CUTOFF, "XMAS2030")


def test_whole_chalet_needs_code_before_and_is_refused_after_cutoff(rules):
    bulk = _request(date(2030, 12, 30), date(2031, 1, 2), rooms=3, is_bulk=True)

    rules.check(bulk, BEFORE_CUTOFF, "XMAS2030")
    with pytest.raises(ChristmasAccessDenied):
        rules.check(bulk, BEFORE_CUTOFF)
    with pytest.raises(ChristmasRuleViolation) as exc:
        rules.check(bulk, AFTER_CUTOFF, "XMAS2030")

    assert exc.value.field == "is_bulk"


def test_no_periods_means_no_rules():
    ChristmasRules().check(_request(date(2030, 12, 24), date(2030, 12, 26), rooms=3, is_bulk=True), AFTER_CUTOFF)


def test_malformed_period_is_rejected():
    with pytest.raises(InvalidDateRange):
        ChristmasPeriod.parse("2030-12-23", "not-a-date")
    with pytest.raises(InvalidDateRange):
        ChristmasPeriod.parse("2031-01-02", "2030-12-23")
