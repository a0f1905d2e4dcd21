"""Integration tests for room listing and admin blockage endpoints."""

from __future__ import annotations

from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.application.hold_manager import HoldManager
from apps.bookings.services import resolve
from apps.pricing.models import RoomRate
from apps.pricing.services import make_booking_request, seed_default_price_tables
from apps.rooms.models import Blockage, Room
from apps.rooms.services import DEFAULT_ROOMS, seed_default_rooms


class RoomAPITests(APITestCase):
    def setUp(self) -> None:
        seed_default_rooms()

    def test_rooms_are_public(self) -> None:
        response = self.client.get(reverse("room-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([room["id"] for room in response.data], [room[0] for room in DEFAULT_ROOMS])

    def test_seed_command_is_repeatable(self) -> None:
        call_command("seed_chalet")
        call_command("seed_chalet")

        self.assertEqual(Room.objects.count(), len(DEFAULT_ROOMS))
        self.assertEqual(RoomRate.objects.count(), 4)


class BlockageAPITests(APITestCase):
    def setUp(self) -> None:
        seed_default_rooms()
        seed_default_price_tables()
        self.admin = get_user_model().objects.create_superuser(
            username="admin",
            email="admin@example.com",
            password="AdminPass123",
        )
        self.list_url = reverse("blockage-list")
        self.start = date.today() + timedelta(days=20)

    def _payload(self, nights=2, rooms=None, **extra):
        payload = {
            "start_date": str(self.start),
            "end_date": str(self.start + timedelta(days=nights)),
            "reason": "Maintenance",
        }
        if rooms is not None:
            payload["rooms"] = rooms
        payload.update(extra)
        return payload

    def test_anonymous_cannot_manage_blockages(self) -> None:
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertFalse(Blockage.objects.exists())

    def test_admin_blocks_single_room(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.list_url, self._payload(rooms=["14"]), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["rooms"], ["14"])
        self.assertFalse(response.data["all_rooms"])
        self.assertEqual(resolve(self.start, "14").status.value, "blocked")
        self.assertEqual(resolve(self.start, "12").status.value, "available")
        # The end date is the first night that is free again
        self.assertEqual(resolve(self.start + timedelta(days=2), "14").status.value, "available")

    def test_blockage_without_rooms_covers_the_chalet(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["all_rooms"])
        for room_id, *_ in DEFAULT_ROOMS:
            self.assertEqual(resolve(self.start, room_id).status.value, "blocked")

    def test_blockage_over_live_hold_is_refused(self) -> None:
        request = make_booking_request(
            {
                "start_date": self.start + timedelta(days=1),
                "end_date": self.start + timedelta(days=3),
                "guest_tier": "external",
                "rooms": [{"room": "14"}],
                "adults": 2,
            }
        )
        HoldManager().create_hold("session-a", request)
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.list_url, self._payload(rooms=["14"]), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "room_unavailable")
        self.assertFalse(Blockage.objects.exists())

    def test_reversed_dates_are_rejected(self) -> None:
        self.client.force_authenticate(self.admin)
        payload = self._payload(
            start_date=str(self.start + timedelta(days=2)),
            end_date=str(self.start),
        )

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "invalid_date_range")

    def test_unknown_room_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.list_url, self._payload(rooms=["99"]), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["field"], "rooms")

    def test_delete_releases_nights(self) -> None:
        self.client.force_authenticate(self.admin)
        created = self.client.post(self.list_url, self._payload(rooms=["12"]), format="json")

        response = self.client.delete(reverse("blockage-detail", kwargs={"pk": created.data["id"]}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(resolve(self.start, "12").status.value, "available")

    def test_list_filters_by_room_and_window(self) -> None:
        self.client.force_authenticate(self.admin)
        self.client.post(self.list_url, self._payload(rooms=["12"]), format="json")
        self.client.post(self.list_url, self._payload(rooms=["14"]), format="json")
        self.client.post(
            self.list_url,
            self._payload(
                start_date=str(self.start + timedelta(days=30)),
                end_date=str(self.start + timedelta(days=31)),
            ),
            format="json",
        )

        for_room = self.client.get(self.list_url, {"room": "12"})
        in_window = self.client.get(
            self.list_url,
            {"start": str(self.start), "end": str(self.start + timedelta(days=10))},
        )

        self.assertEqual(len(for_room.data), 2)
        self.assertEqual(len(in_window.data), 2)
