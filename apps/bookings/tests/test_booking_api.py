"""Integration tests for availability, hold and booking API endpoints."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.application.hold_manager import hold_manager
from apps.bookings.models import Booking, ProposedBooking, RoomNight
from apps.pricing.models import RoomRate
from apps.pricing.services import seed_default_price_tables
from apps.rooms.services import seed_default_rooms


class BookingAPITestCase(APITestCase):
    def setUp(self) -> None:
        seed_default_rooms()
        seed_default_price_tables()
        self.check_in = date.today() + timedelta(days=14)
        self.session = {"HTTP_X_SESSION_ID": "session-a"}

    def _shape(self, rooms=("12",), nights=2, start=None, **extra):
        start = start or self.check_in
        payload = {
            "start_date": str(start),
            "end_date": str(start + timedelta(days=nights)),
            "guest_tier": "resident",
            "rooms": [{"room": room} for room in rooms],
            "adults": 1,
        }
        payload.update(extra)
        return payload

    def _booking_payload(self, proposal_ids=(), **extra):
        payload = self._shape(**extra)
        payload.update(
            name="Jana Nováková",
            email="jana@example.com",
            phone="+420 600 000 000",
            proposal_ids=list(proposal_ids),
        )
        return payload

    def _hold(self, session="session-a", **extra):
        return self.client.post(
            reverse("hold-list"),
            self._shape(**extra),
            format="json",
            HTTP_X_SESSION_ID=session,
        )

    def _commit(self, **extra):
        return self.client.post(reverse("booking-list"), self._booking_payload(**extra), format="json", **self.session)


class AvailabilityAPITests(BookingAPITestCase):
    def test_free_room_is_available(self) -> None:
        response = self.client.get(reverse("availability"), {"date": str(self.check_in), "room": "12"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "available")
        self.assertFalse(response.data["night_before_occupied"])
        self.assertFalse(response.data["night_after_occupied"])

    def test_own_hold_is_flagged_only_for_its_session(self) -> None:
        self._hold()
        url = reverse("availability")
        query = {"date": str(self.check_in), "room": "12"}

        mine = self.client.get(url, query, **self.session)
        theirs = self.client.get(url, query, HTTP_X_SESSION_ID="session-b")

        self.assertEqual(mine.data["status"], "proposed")
        self.assertTrue(mine.data["own_hold"])
        self.assertEqual(theirs.data["status"], "proposed")
        self.assertFalse(theirs.data["own_hold"])

    def test_hold_ids_are_shown_only_to_their_session(self) -> None:
        proposal_id = self._hold().data["proposal_id"]
        url = reverse("availability")
        query = {"date": str(self.check_in), "room": "12"}

        mine = self.client.get(url, query, **self.session)
        anonymous = self.client.get(url, query)
        calendar = self.client.get(
            reverse("calendar"),
            {"start": str(self.check_in), "end": str(self.check_in + timedelta(days=2)), "rooms": "12"},
        )

        self.assertEqual(mine.data["night_after_reservation"], proposal_id)
        self.assertIsNone(anonymous.data["night_before_reservation"])
        self.assertIsNone(anonymous.data["night_after_reservation"])
        self.assertNotIn(proposal_id, str(calendar.data))

    def test_edge_between_hold_and_booking(self) -> None:
        self._hold(start=self.check_in - timedelta(days=2))
        self._commit()

        response = self.client.get(reverse("availability"), {"date": str(self.check_in), "room": "12"})

        self.assertEqual(response.data["status"], "edge")
        self.assertEqual(response.data["night_before_kind"], "proposed")
        self.assertEqual(response.data["night_after_kind"], "confirmed")
        self.assertTrue(response.data["is_mixed"])

    def test_unknown_room_is_rejected(self) -> None:
        response = self.client.get(reverse("availability"), {"date": str(self.check_in), "room": "99"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_booking_request")

    def test_calendar_grid(self) -> None:
        self._commit()
        query = {
            "start": str(self.check_in - timedelta(days=1)),
            "end": str(self.check_in + timedelta(days=3)),
            "rooms": "12,13",
        }

        response = self.client.get(reverse("calendar"), query)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(list(response.data["rooms"]), ["12", "13"])
        self.assertEqual(
            [cell["status"] for cell in response.data["rooms"]["12"]],
            ["available", "booked", "booked", "booked"],
        )
        self.assertEqual({cell["status"] for cell in response.data["rooms"]["13"]}, {"available"})

    def test_calendar_window_is_limited(self) -> None:
        query = {"start": str(self.check_in), "end": str(self.check_in + timedelta(days=500))}

        response = self.client.get(reverse("calendar"), query)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_date_range")


class HoldAPITests(BookingAPITestCase):
    def test_create_and_list_holds(self) -> None:
        response = self._hold()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["rooms"], ["12"])
        self.assertEqual(response.data["total_price"], 600)
        listed = self.client.get(reverse("hold-list"), **self.session)
        self.assertEqual([hold["proposal_id"] for hold in listed.data], [response.data["proposal_id"]])

    def test_hold_requires_session_header(self) -> None:
        response = self.client.post(reverse("hold-list"), self._shape(), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "session")

    def test_conflicting_hold_returns_409(self) -> None:
        self._hold()

        response = self._hold(session="session-b", start=self.check_in + timedelta(days=1))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "room_unavailable")
        self.assertIn("conflicts", response.data["details"])

    def test_validation_errors_name_the_field(self) -> None:
        response = self._hold(guests=[{"person_type": "adult"}, {"person_type": "child"}])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "guest_count_mismatch")
        self.assertEqual(response.data["field"], "guests")

    def test_delete_hold_is_idempotent(self) -> None:
        proposal_id = self._hold().data["proposal_id"]
        url = reverse("hold-detail", kwargs={"proposal_id": proposal_id})

        first = self.client.delete(url, **self.session)
        second = self.client.delete(url, **self.session)

        self.assertEqual(first.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(second.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProposedBooking.objects.exists())

    def test_other_session_cannot_delete_hold(self) -> None:
        proposal_id = self._hold().data["proposal_id"]

        response = self.client.delete(
            reverse("hold-detail", kwargs={"proposal_id": proposal_id}),
            HTTP_X_SESSION_ID="session-b",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "hold_not_owned")

    def test_delete_hold_without_session_header_is_refused(self) -> None:
        proposal_id = self._hold().data["proposal_id"]

        response = self.client.delete(reverse("hold-detail", kwargs={"proposal_id": proposal_id}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "hold_not_owned")
        self.assertTrue(ProposedBooking.objects.filter(pk=proposal_id).exists())

    def test_conflict_details_hide_hold_ids(self) -> None:
        proposal_id = self._hold().data["proposal_id"]

        response = self._hold(session="session-b")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertNotIn(proposal_id, str(response.data))

    def test_delete_all_session_holds(self) -> None:
        self._hold(rooms=("12",))
        self._hold(rooms=("13",))

        response = self.client.delete(reverse("hold-list"), **self.session)

        self.assertEqual(response.data, {"deleted": 2})


class BookingAPITests(BookingAPITestCase):
    def test_commit_hold_into_booking(self) -> None:
        proposal_id = self._hold().data["proposal_id"]

        response = self._commit(proposal_ids=[proposal_id])

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["code"].startswith("BK"))
        self.assertEqual(len(response.data["edit_token"]), 30)
        self.assertEqual(response.data["total_price"], 600)
        self.assertEqual(response.data["rooms"][0]["room"], "12")
        self.assertFalse(ProposedBooking.objects.exists())
        self.assertEqual(RoomNight.objects.count(), 2)

    def test_commit_of_hold_without_session_header_is_refused(self) -> None:
        proposal_id = self._hold().data["proposal_id"]

        response = self.client.post(
            reverse("booking-list"),
            self._booking_payload(proposal_ids=[proposal_id]),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["code"], "hold_not_owned")
        self.assertFalse(Booking.objects.exists())
        self.assertTrue(ProposedBooking.objects.filter(pk=proposal_id).exists())

    def test_double_commit_returns_conflict(self) -> None:
        first = self._commit()
        second = self._commit(nights=1)

        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT, second.data)
        self.assertEqual(Booking.objects.count(), 1)

    def test_commit_with_broken_price_tables_returns_503(self) -> None:
        RoomRate.objects.filter(guest_tier="resident", room_size="small").delete()

        response = self._commit()

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE, response.data)
        self.assertEqual(response.data["code"], "invalid_price_configuration")
        self.assertFalse(Booking.objects.exists())

    def test_contact_details_are_required(self) -> None:
        payload = self._booking_payload()
        del payload["email"]

        response = self.client.post(reverse("booking-list"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data)

    def test_retrieve_requires_edit_token(self) -> None:
        created = self._commit().data
        url = reverse("booking-detail", kwargs={"code": created["code"]})

        without = self.client.get(url)
        wrong = self.client.get(url, HTTP_X_EDIT_TOKEN="nope")
        right = self.client.get(url, HTTP_X_EDIT_TOKEN=created["edit_token"])

        self.assertEqual(without.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(wrong.data["code"], "edit_token_mismatch")
        self.assertEqual(right.status_code, status.HTTP_200_OK)
        self.assertNotIn("edit_token", right.data)
        self.assertEqual(right.data["current_price"], 600)

    def test_non_ascii_edit_token_is_a_mismatch(self) -> None:
        created = self._commit().data

        response = self.client.get(
            reverse("booking-detail", kwargs={"code": created["code"]}),
            HTTP_X_EDIT_TOKEN="é" * 30,
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "edit_token_mismatch")

    @override_settings(CHRISTMAS_PERIODS=[("2030-12-23", "2031-01-02")], CHRISTMAS_ACCESS_CODES=["XMAS2030"])
    def test_christmas_code_is_checked_before_cutoff(self) -> None:
        christmas = date(2030, 12, 27)
        with mock.patch.object(hold_manager, "_now", datetime(2030, 9, 15, 12, 0, tzinfo=dt_timezone.utc)):
            refused = self._commit(start=christmas)
            accepted = self._commit(start=christmas, christmas_code="XMAS2030")

        self.assertEqual(refused.status_code, status.HTTP_400_BAD_REQUEST, refused.data)
        self.assertEqual(refused.data["code"], "christmas_code_invalid")
        self.assertEqual(refused.data["field"], "christmas_code")
        self.assertEqual(accepted.status_code, status.HTTP_201_CREATED, accepted.data)

    def test_update_with_token(self) -> None:
        created = self._commit().data
        url = reverse("booking-detail", kwargs={"code": created["code"]})
        payload = self._booking_payload(nights=3, adults=2)

        response = self.client.put(url, payload, format="json", HTTP_X_EDIT_TOKEN=created["edit_token"])

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_price"], (250 + 2 * 50) * 3)
        self.assertEqual(RoomNight.objects.count(), 3)

    def test_delete_with_token(self) -> None:
        created = self._commit().data
        url = reverse("booking-detail", kwargs={"code": created["code"]})

        response = self.client.delete(url, HTTP_X_EDIT_TOKEN=created["edit_token"])

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Booking.objects.exists())
        self.assertFalse(RoomNight.objects.exists())

    def test_missing_booking_returns_404(self) -> None:
        response = self.client.get(
            reverse("booking-detail", kwargs={"code": "BKMISSING0000"}),
            HTTP_X_EDIT_TOKEN="token",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_listing_is_admin_only(self) -> None:
        self._commit()
        self._commit(rooms=("14",), start=self.check_in + timedelta(days=10))
        admin = get_user_model().objects.create_superuser(
            username="admin",
            email="admin@example.com",
            password="AdminPass123",
        )

        anonymous = self.client.get(reverse("booking-list"))
        self.client.force_authenticate(admin)
        everything = self.client.get(reverse("booking-list"))
        for_room = self.client.get(reverse("booking-list"), {"room": "14"})
        admin_view = self.client.get(reverse("booking-detail", kwargs={"code": for_room.data[0]["code"]}))

        self.assertEqual(anonymous.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(len(everything.data), 2)
        self.assertEqual(len(for_room.data), 1)
        self.assertEqual(admin_view.status_code, status.HTTP_200_OK)
