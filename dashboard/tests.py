from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from django.contrib.auth.models import User
from django.db import OperationalError
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from accounts.models import Owner, Client
from booking.models import Court, Reservation, ReservationStatus


def local_dt(day, hour):
    return timezone.make_aware(datetime(day.year, day.month, day.day, hour))


class DashboardBaseTest(TestCase):
    def setUp(self):
        user = User.objects.create_user(username="owner@arena.com", email="owner@arena.com", password="secret123")
        self.owner = Owner.objects.create(
            user=user, name="Maria", establishment_name="Arena Central",
            city="Campinas", phone="19999990000", court_count=2,
        )
        self.court = Court.objects.create(owner=self.owner, name="Court 1", sport_type="futsal",
                                          price_per_hour=Decimal("80.00"))
        self.client.force_login(user)
        self.today = timezone.localdate()
        self.tomorrow = self.today + timedelta(days=1)

    def make_client(self, first_name="Ana", last_name="Souza", email=None):
        email = email or f"{first_name.lower()}@example.com"
        user = User.objects.create_user(username=email, email=email, password="secret123")
        return Client.objects.create(user=user, first_name=first_name, last_name=last_name, email=email)

    def reserve(self, day, hour, status=ReservationStatus.PENDING, court=None, client=None, price="80.00"):
        return Reservation.objects.create(
            owner=self.owner, court=court or self.court, client=client,
            starts_at=local_dt(day, hour), status=status, price=Decimal(price),
        )


class SummaryTests(DashboardBaseTest):
    def test_summary_figures(self):
        self.reserve(self.today, 9, status=ReservationStatus.PAID)
        self.reserve(self.today, 10)
        self.reserve(self.today, 11, status=ReservationStatus.CANCELED)

        res = self.client.get(reverse("dashboard:summary"))
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["establishment"], "Arena Central")
        self.assertEqual(body["bookings_today"], 2)
        self.assertEqual(body["revenue_today"], "80.00")
        # 2 active reservations over 7 days x 16 hours x 1 court
        self.assertEqual(body["occupancy_this_week"], 2)
        self.assertEqual(len(body["recent_reservations"]), 3)

    def test_summary_without_courts(self):
        self.court.is_active = False
        self.court.save()
        body = self.client.get(reverse("dashboard:summary")).json()
        self.assertEqual(body["occupancy_this_week"], 0)
        self.assertEqual(body["revenue_today"], "0.00")

    @override_settings(DASHBOARD_RECENT_LIMIT=2)
    def test_recent_limit(self):
        for hour in (8, 9, 10):
            self.reserve(self.tomorrow, hour)
        body = self.client.get(reverse("dashboard:summary")).json()
        self.assertEqual(len(body["recent_reservations"]), 2)

    def test_summary_is_per_owner(self):
        other_user = User.objects.create_user(username="other@arena.com", password="secret123")
        other = Owner.objects.create(user=other_user, name="Jo", establishment_name="Other",
                                     city="Sorocaba", phone="15999990000")
        other_court = Court.objects.create(owner=other, name="X", sport_type="tennis", price_per_hour=10)
        Reservation.objects.create(owner=other, court=other_court, starts_at=local_dt(self.today, 9))
        body = self.client.get(reverse("dashboard:summary")).json()
        self.assertEqual(body["bookings_today"], 0)


class AgendaTests(DashboardBaseTest):
    def test_agenda_lists_canceled_entries(self):
        self.reserve(self.tomorrow, 10, status=ReservationStatus.CANCELED)
        self.reserve(self.tomorrow, 10, client=self.make_client())

        res = self.client.get(reverse("dashboard:agenda"), {"date": self.tomorrow.isoformat()})
        self.assertEqual(res.status_code, 200)
        cells = {(c["date"], c["hour"]): c for row in res.json()["grid"] for c in row["cells"]}
        cell = cells[(self.tomorrow.isoformat(), "10:00")]
        self.assertEqual(cell["state"], "full")
        self.assertEqual(cell["available"], 0)
        self.assertEqual(sorted(r["status"] for r in cell["reservations"]), ["canceled", "pending"])
        self.assertIn("Ana Souza", [r["client_name"] for r in cell["reservations"]])

    def test_agenda_rejects_dates_at_the_edge_of_the_calendar(self):
        res = self.client.get(reverse("dashboard:agenda"), {"date": "0001-01-01"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["detail"], "bad date")

    def test_agenda_capacity_ignores_deactivated_courts(self):
        old = Court.objects.create(owner=self.owner, name="Old", sport_type="tennis")
        self.reserve(self.tomorrow, 10, court=old)
        old.is_active = False
        old.save()

        res = self.client.get(reverse("dashboard:agenda"), {"date": self.tomorrow.isoformat()})
        cells = {(c["date"], c["hour"]): c for row in res.json()["grid"] for c in row["cells"]}
        cell = cells[(self.tomorrow.isoformat(), "10:00")]
        self.assertEqual(cell["state"], "available")
        self.assertEqual(cell["available"], 1)
        # the booking on the deactivated court is still listed for the owner
        self.assertEqual(len(cell["reservations"]), 1)

    def test_agenda_bad_date(self):
        res = self.client.get(reverse("dashboard:agenda"), {"date": "2026-13-40"})
        self.assertEqual(res.status_code, 400)


class CourtManagementTests(DashboardBaseTest):
    def test_list_includes_inactive(self):
        Court.objects.create(owner=self.owner, name="Old", sport_type="tennis", is_active=False)
        res = self.client.get(reverse("dashboard:courts"))
        self.assertEqual([c["name"] for c in res.json()["courts"]], ["Court 1", "Old"])

    def test_create_court(self):
        res = self.client.post(reverse("dashboard:courts"), {
            "name": "Court 2", "sport_type": "volleyball", "price_per_hour": "65.00", "is_active": "on",
        })
        self.assertEqual(res.status_code, 201)
        court = Court.objects.get(owner=self.owner, name="Court 2")
        self.assertEqual(court.price_per_hour, Decimal("65.00"))
        self.assertTrue(court.is_active)

    def test_create_court_negative_price(self):
        res = self.client.post(reverse("dashboard:courts"), {
            "name": "Court 2", "sport_type": "volleyball", "price_per_hour": "-1",
        })
        self.assertEqual(res.status_code, 400)
        self.assertIn("price_per_hour", res.json()["errors"])

    def test_partial_update(self):
        res = self.client.post(reverse("dashboard:court_detail", args=[self.court.id]), {"price_per_hour": "95.00"})
        self.assertEqual(res.status_code, 200)
        self.court.refresh_from_db()
        self.assertEqual(self.court.price_per_hour, Decimal("95.00"))
        self.assertEqual(self.court.name, "Court 1")
        self.assertTrue(self.court.is_active)

    def test_update_other_owners_court(self):
        other_user = User.objects.create_user(username="other@arena.com", password="secret123")
        other = Owner.objects.create(user=other_user, name="Jo", establishment_name="Other",
                                     city="Sorocaba", phone="15999990000")
        foreign = Court.objects.create(owner=other, name="X", sport_type="tennis")
        res = self.client.post(reverse("dashboard:court_detail", args=[foreign.id]), {"name": "Mine"})
        self.assertEqual(res.status_code, 404)


class ManualReservationTests(DashboardBaseTest):
    def _post(self, **overrides):
        data = {"court_id": str(self.court.id), "date": self.tomorrow.isoformat(),
                "time": "18:00", "client_name": "Phone booking"}
        data.update(overrides)
        return self.client.post(reverse("dashboard:reservations"), data)

    def test_manual_reservation(self):
        res = self._post()
        self.assertEqual(res.status_code, 201)
        body = res.json()["reservation"]
        self.assertEqual(body["status"], "pending")
        self.assertEqual(body["client_name"], "Phone booking")
        self.assertIsNone(body["client_id"])

    def test_manual_reservation_conflict(self):
        self._post()
        res = self._post(client_name="Someone else")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(Reservation.objects.count(), 1)

    def test_manual_reservation_bad_time(self):
        res = self._post(time="18:15")
        self.assertEqual(res.status_code, 400)
        self.assertIn("time", res.json()["errors"])

    def test_manual_reservation_past_day(self):
        res = self._post(date=(self.today - timedelta(days=1)).isoformat())
        self.assertEqual(res.status_code, 400)

    def test_manual_reservation_write_failure(self):
        with patch("dashboard.views.create_reservation", side_effect=OperationalError("locked")):
            res = self._post()
        self.assertEqual(res.status_code, 503)
        self.assertTrue(res.json()["retryable"])


class ReservationStatusTests(DashboardBaseTest):
    def _set(self, reservation, value):
        return self.client.post(reverse("dashboard:reservation_status", args=[reservation.id]), {"status": value})

    def test_mark_paid_then_cancel(self):
        r = self.reserve(self.tomorrow, 10)
        res = self._set(r, "paid")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "paid")
        self.assertEqual(self._set(r, "canceled").status_code, 200)
        r.refresh_from_db()
        self.assertEqual(r.status, ReservationStatus.CANCELED)

    def test_canceled_is_terminal(self):
        r = self.reserve(self.tomorrow, 10, status=ReservationStatus.CANCELED)
        res = self._set(r, "paid")
        self.assertEqual(res.status_code, 409)

    def test_paid_twice_rejected(self):
        r = self.reserve(self.tomorrow, 10, status=ReservationStatus.PAID)
        self.assertEqual(self._set(r, "paid").status_code, 409)

    def test_mark_paid_with_payment_type(self):
        r = self.reserve(self.tomorrow, 10)
        res = self.client.post(reverse("dashboard:reservation_status", args=[r.id]),
                               {"status": "paid", "payment_type": "PIX"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["payment_type"], "pix")
        r.refresh_from_db()
        self.assertEqual(r.payment_type, "pix")

    def test_unknown_payment_type(self):
        r = self.reserve(self.tomorrow, 10)
        res = self.client.post(reverse("dashboard:reservation_status", args=[r.id]),
                               {"status": "paid", "payment_type": "barter"})
        self.assertEqual(res.status_code, 400)
        r.refresh_from_db()
        self.assertEqual(r.status, ReservationStatus.PENDING)

    def test_unknown_status(self):
        r = self.reserve(self.tomorrow, 10)
        self.assertEqual(self._set(r, "pending").status_code, 400)

    def test_missing_reservation(self):
        res = self.client.post(reverse("dashboard:reservation_status", args=[uuid4()]), {"status": "paid"})
        self.assertEqual(res.status_code, 404)


class ClientListTests(DashboardBaseTest):
    def test_clients_with_activity(self):
        ana = self.make_client("Ana", "Souza")
        bruno = self.make_client("Bruno", "Lima")
        self.reserve(self.tomorrow, 10, client=ana)
        self.reserve(self.tomorrow, 11, client=ana, status=ReservationStatus.PAID)
        self.reserve(self.today - timedelta(days=90), 10, client=bruno)

        body = self.client.get(reverse("dashboard:clients")).json()
        self.assertEqual(body["total_clients"], 2)
        self.assertEqual(body["active_clients"], 1)
        by_name = {c["name"]: c for c in body["clients"]}
        self.assertEqual(by_name["Ana Souza"]["reservation_count"], 2)
        self.assertTrue(by_name["Ana Souza"]["active"])
        self.assertFalse(by_name["Bruno Lima"]["active"])

    def test_search(self):
        ana = self.make_client("Ana", "Souza")
        bruno = self.make_client("Bruno", "Lima")
        self.reserve(self.tomorrow, 10, client=ana)
        self.reserve(self.tomorrow, 11, client=bruno)
        body = self.client.get(reverse("dashboard:clients"), {"q": "lima"}).json()
        self.assertEqual([c["name"] for c in body["clients"]], ["Bruno Lima"])

    def test_clients_of_other_establishments_hidden(self):
        self.make_client("Carla", "Dias")
        body = self.client.get(reverse("dashboard:clients")).json()
        self.assertEqual(body["total_clients"], 0)


class SettingsTests(DashboardBaseTest):
    def test_get_settings(self):
        body = self.client.get(reverse("dashboard:settings")).json()
        self.assertEqual(body["email"], "owner@arena.com")
        self.assertEqual(body["establishment_name"], "Arena Central")

    def test_update_profile(self):
        res = self.client.post(reverse("dashboard:settings"), {"section": "profile", "phone": "19888887777"})
        self.assertEqual(res.status_code, 200)
        self.owner.refresh_from_db()
        self.assertEqual(self.owner.phone, "19888887777")
        self.assertEqual(self.owner.name, "Maria")

    def test_update_establishment(self):
        res = self.client.post(reverse("dashboard:settings"), {
            "section": "establishment", "establishment_name": "Arena Norte", "city": "Valinhos",
        })
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["owner"]["city"], "Valinhos")

    def test_short_phone_rejected(self):
        res = self.client.post(reverse("dashboard:settings"), {"section": "profile", "phone": "123"})
        self.assertEqual(res.status_code, 400)

    def test_unknown_section(self):
        res = self.client.post(reverse("dashboard:settings"), {"section": "billing"})
        self.assertEqual(res.status_code, 400)
