"""Integration tests for the price preview and price table endpoints."""

from __future__ import annotations

import copy

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.pricing.domain.tables import DEFAULT_PRICE_TABLES
from apps.pricing.models import BulkRate, RoomRate
from apps.pricing.services import display_price, load_price_tables, make_booking_request, seed_default_price_tables
from apps.rooms.services import seed_default_rooms


class PricePreviewAPITests(APITestCase):
    def setUp(self) -> None:
        seed_default_rooms()
        seed_default_price_tables()
        self.url = reverse("price-preview")

    def test_simple_preview(self) -> None:
        payload = {
            "start_date": "2025-10-01",
            "end_date": "2025-10-03",
            "guest_tier": "resident",
            "rooms": [{"room": "12"}],
            "adults": 1,
        }

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"total": 600, "strategy": "simple"})

    def test_roster_preview_uses_per_guest_strategy(self) -> None:
        payload = {
            "start_date": "2025-10-01",
            "end_date": "2025-10-02",
            "guest_tier": "external",
            "rooms": [{"room": "12"}, {"room": "13"}],
            "adults": 2,
            "children": 1,
            "guests": [
                {"name": "Ana", "person_type": "adult", "price_tier": "resident"},
                {"name": "Ben", "person_type": "adult"},
                {"name": "Cid", "person_type": "child"},
            ],
        }

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["strategy"], "per_guest")
        self.assertEqual(response.data["total"], 2 * 250 + 50 + 100 + 50)

    def test_bulk_preview_covers_whole_chalet(self) -> None:
        payload = {
            "start_date": "2025-10-01",
            "end_date": "2025-10-02",
            "guest_tier": "resident",
            "is_bulk": True,
            "adults": 10,
            "children": 4,
        }

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"total": 2000 + 10 * 100, "strategy": "bulk"})

    def test_reversed_dates_are_a_validation_error(self) -> None:
        payload = {"start_date": "2025-10-03", "end_date": "2025-10-01", "rooms": [{"room": "12"}]}

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_date_range")
        self.assertEqual(response.data["field"], "dates")

    def test_unknown_room_is_rejected(self) -> None:
        payload = {"start_date": "2025-10-01", "end_date": "2025-10-02", "rooms": [{"room": "99"}]}

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_booking_request")

    def test_roster_mismatch_is_reported_on_guests_field(self) -> None:
        payload = {
            "start_date": "2025-10-01",
            "end_date": "2025-10-02",
            "rooms": [{"room": "12"}],
            "adults": 2,
            "guests": [{"name": "Ana", "person_type": "adult"}],
        }

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "guest_count_mismatch")
        self.assertEqual(response.data["field"], "guests")

    def test_broken_tables_fail_hard(self) -> None:
        RoomRate.objects.filter(guest_tier="external", room_size="large").delete()
        payload = {"start_date": "2025-10-01", "end_date": "2025-10-02", "rooms": [{"room": "12"}]}

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["code"], "invalid_price_configuration")

    def test_display_price_falls_back_to_stored_price(self) -> None:
        request = make_booking_request(
            {"start_date": "2025-10-01", "end_date": "2025-10-02", "rooms": [{"room": "12"}]}
        )
        self.assertEqual(display_price(request, stored_price=123), 400)

        RoomRate.objects.all().delete()

        with self.assertLogs("apps.pricing.services", level="WARNING"):
            self.assertEqual(display_price(request, stored_price=123), 123)


class PriceTablesAPITests(APITestCase):
    def setUp(self) -> None:
        seed_default_price_tables()
        self.admin = get_user_model().objects.create_superuser(
            username="admin", email="admin@example.com", password="AdminPass123"
        )
        self.url = reverse("price-tables")

    def test_anonymous_cannot_read_tables(self) -> None:
        response = self.client.get(self.url)

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_admin_reads_tables(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, DEFAULT_PRICE_TABLES)

    def test_admin_replaces_tables(self) -> None:
        self.client.force_authenticate(self.admin)
        data = copy.deepcopy(DEFAULT_PRICE_TABLES)
        data["resident"]["small"]["empty"] = 300
        data["bulk"]["base"] = 2500

        response = self.client.put(self.url, data, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(RoomRate.objects.get(guest_tier="resident", room_size="small").empty_price, 300)
        self.assertEqual(BulkRate.objects.get().base_price, 2500)
        self.assertEqual(load_price_tables().to_dict(), data)

    def test_incomplete_tables_are_rejected_and_kept(self) -> None:
        self.client.force_authenticate(self.admin)
        data = copy.deepcopy(DEFAULT_PRICE_TABLES)
        del data["external"]["large"]

        response = self.client.put(self.url, data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_price_configuration")
        self.assertEqual(RoomRate.objects.count(), 4)

    def test_negative_values_are_rejected(self) -> None:
        self.client.force_authenticate(self.admin)
        data = copy.deepcopy(DEFAULT_PRICE_TABLES)
        data["resident"]["large"]["child"] = -5

        response = self.client.put(self.url, data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            RoomRate.objects.get(guest_tier="resident", room_size="large").child_price, 35
        )
