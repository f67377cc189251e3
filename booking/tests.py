import json
from io import StringIO
import tempfile
from datetime import datetime, date, timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError, OperationalError, transaction
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import Owner, Client
from .availability import (
    SlotState, available_count, build_week_grid, classify_slot, is_full, is_slot_bookable,
    reservations_at, resolve_slot, slots_for_window, week_days,
)
from .exceptions import (
    CourtNotFound, InvalidPaymentType, InvalidSlot, InvalidTransition, PastSlot, SlotUnavailable,
)
from .models import Court, PaymentType, Reservation, ReservationStatus
from .services import change_status, create_reservation, parse_slot

_counter = {'user': 0}


def local_dt(day, hour, minute=0):
    return timezone.make_aware(datetime(day.year, day.month, day.day, hour, minute))


def make_reservation(court_id, starts_at, status="pending"):
    return SimpleNamespace(id=uuid4(), court_id=court_id, starts_at=starts_at, status=status)


def create_owner(email=None, **kwargs):
    _counter['user'] += 1
    email = email or f"owner{_counter['user']}@example.com"
    user = User.objects.create_user(username=email, email=email, password="secret123")
    defaults = {
        'name': 'Owner',
        'establishment_name': f"Arena {_counter['user']}",
        'city': 'Campinas',
        'phone': '19999990000',
        'court_count': 2,
    }
    defaults.update(kwargs)
    return Owner.objects.create(user=user, **defaults)


def create_client(email=None, first_name="Ana", last_name="Souza"):
    _counter['user'] += 1
    email = email or f"client{_counter['user']}@example.com"
    user = User.objects.create_user(username=email, email=email, password="secret123")
    return Client.objects.create(user=user, first_name=first_name, last_name=last_name, email=email)


def create_court(owner, name="Court 1", sport_type="futsal", price="80.00", **kwargs):
    return Court.objects.create(owner=owner, name=name, sport_type=sport_type, price_per_hour=Decimal(price), **kwargs)


class SlotWindowTests(SimpleTestCase):
    def test_labels_cover_window_inclusive(self):
        labels = slots_for_window(7, 22)
        self.assertEqual(len(labels), 16)
        self.assertEqual(labels[0], "07:00")
        self.assertEqual(labels[-1], "22:00")

    def test_single_hour_window(self):
        self.assertEqual(slots_for_window(9, 9), ["09:00"])

    def test_inverted_window_is_empty(self):
        self.assertEqual(slots_for_window(10, 9), [])

    def test_week_starts_on_sunday_by_default(self):
        days = week_days(date(2026, 3, 11))
        self.assertEqual(days[0], date(2026, 3, 8))
        self.assertEqual(days[-1], date(2026, 3, 14))
        self.assertEqual(len(days), 7)

    def test_week_start_is_configurable(self):
        days = week_days(date(2026, 3, 11), week_start=0)
        self.assertEqual(days[0], date(2026, 3, 9))

    def test_anchor_on_week_start(self):
        self.assertEqual(week_days(date(2026, 3, 8))[0], date(2026, 3, 8))


class ResolverTests(SimpleTestCase):
    def setUp(self):
        self.today = date(2026, 3, 11)
        self.now = local_dt(self.today, 15, 30)
        self.courts = [SimpleNamespace(id=f"Q{i}") for i in range(1, 5)]

    def _at(self, hour, day=None, court="Q1", status="pending"):
        return make_reservation(court, local_dt(day or self.today, hour), status)

    def test_reservations_at_keeps_input_order(self):
        first = self._at(10, court="Q3")
        other_hour = self._at(11, court="Q1")
        second = self._at(10, court="Q1")
        found = reservations_at([first, other_hour, second], self.today, "10:00")
        self.assertEqual(found, [first, second])

    def test_reservations_at_matches_calendar_day_only(self):
        tomorrow = self._at(10, day=self.today + timedelta(days=1))
        self.assertEqual(reservations_at([tomorrow], self.today, "10:00"), [])

    def test_reservations_at_ignores_off_grid_minutes(self):
        r = make_reservation("Q1", local_dt(self.today, 10, 30))
        self.assertEqual(reservations_at([r], self.today, "10:00"), [])

    def test_reservations_at_drops_canceled_unless_asked(self):
        canceled = self._at(10, status="canceled")
        self.assertEqual(reservations_at([canceled], self.today, "10:00"), [])
        self.assertEqual(reservations_at([canceled], self.today, "10:00", include_canceled=True), [canceled])

    def test_reservations_at_accepts_naive_datetimes(self):
        r = make_reservation("Q1", datetime(2026, 3, 11, 10, 0))
        self.assertEqual(reservations_at([r], self.today, "10:00"), [r])

    def test_available_count_formula(self):
        for total in range(0, 6):
            for booked in range(0, 8):
                reservations = [self._at(10, court=f"Q{i}") for i in range(booked)]
                self.assertEqual(available_count(total, reservations), max(total - booked, 0))

    def test_available_count_accepts_court_list(self):
        self.assertEqual(available_count(self.courts, [self._at(10)]), 3)

    def test_canceled_never_reduce_availability(self):
        canceled = [self._at(10, court=f"Q{i}", status="canceled") for i in range(1, 5)]
        self.assertEqual(available_count(4, canceled), 4)
        self.assertFalse(is_full(4, canceled))

    def test_bookable_compares_dates_only(self):
        self.assertTrue(is_slot_bookable(self.today, self.now))
        self.assertTrue(is_slot_bookable(self.today + timedelta(days=3), self.now))
        self.assertFalse(is_slot_bookable(self.today - timedelta(days=1), self.now))

    def test_scenario_empty_slot_is_available_with_all_courts(self):
        slot = resolve_slot(self.today, "18:00", [], self.courts, self.now)
        self.assertEqual(slot.state, SlotState.AVAILABLE)
        self.assertEqual(slot.free_court_ids, ["Q1", "Q2", "Q3", "Q4"])
        self.assertEqual(slot.available, 4)

    def test_scenario_all_courts_reserved_is_full(self):
        reservations = [self._at(18, court=c.id) for c in self.courts]
        self.assertEqual(classify_slot(self.today, "18:00", reservations, 4, self.now), SlotState.FULL)
        slot = resolve_slot(self.today, "18:00", reservations, self.courts, self.now)
        self.assertEqual(slot.free_court_ids, [])
        self.assertFalse(slot.is_bookable)

    def test_scenario_canceled_and_paid(self):
        reservations = [self._at(18, court="Q1", status="canceled"), self._at(18, court="Q2", status="paid")]
        booked = reservations_at(reservations, self.today, "18:00")
        self.assertEqual(available_count(4, booked), 3)
        slot = resolve_slot(self.today, "18:00", reservations, self.courts, self.now)
        self.assertEqual(slot.state, SlotState.AVAILABLE)
        self.assertEqual(slot.free_court_ids, ["Q1", "Q3", "Q4"])

    def test_scenario_yesterday_is_past(self):
        yesterday = self.today - timedelta(days=1)
        self.assertEqual(classify_slot(yesterday, "18:00", [], 4, self.now), SlotState.PAST)
        slot = resolve_slot(yesterday, "18:00", [], self.courts, self.now)
        self.assertEqual(slot.free_court_ids, [])

    def test_past_wins_over_full(self):
        yesterday = self.today - timedelta(days=1)
        reservations = [self._at(18, day=yesterday, court=c.id) for c in self.courts]
        self.assertEqual(classify_slot(yesterday, "18:00", reservations, 4, self.now), SlotState.PAST)

    def test_scenario_earlier_hour_today_stays_available(self):
        self.assertEqual(classify_slot(self.today, "08:00", [], 4, self.now), SlotState.AVAILABLE)

    def test_zero_courts_is_full(self):
        self.assertEqual(classify_slot(self.today, "08:00", [], 0, self.now), SlotState.FULL)
        self.assertEqual(classify_slot(self.today, "08:00", [], [], self.now), SlotState.FULL)

    def test_out_of_window_label_does_not_fail(self):
        self.assertEqual(classify_slot(self.today, "03:00", [self._at(10)], 4, self.now), SlotState.AVAILABLE)

    def test_reservations_on_unlisted_courts_take_no_capacity(self):
        courts = self.courts[:2]
        reservations = [self._at(18, court="Q3"), self._at(18, court="Q4")]
        booked = reservations_at(reservations, self.today, "18:00")
        self.assertEqual(available_count(courts, booked), 2)
        slot = resolve_slot(self.today, "18:00", reservations, courts, self.now)
        self.assertEqual(slot.state, SlotState.AVAILABLE)
        self.assertEqual(slot.available, len(slot.free_court_ids))
        self.assertEqual(slot.free_court_ids, ["Q1", "Q2"])

    def test_count_only_courts_give_no_free_ids(self):
        slot = resolve_slot(self.today, "18:00", [], 4, self.now)
        self.assertEqual(slot.state, SlotState.AVAILABLE)
        self.assertEqual(slot.free_court_ids, [])

    def test_classification_is_repeatable(self):
        reservations = [self._at(18, court="Q1"), self._at(18, court="Q2", status="canceled")]
        first = classify_slot(self.today, "18:00", reservations, 4, self.now)
        second = classify_slot(self.today, "18:00", reservations, 4, self.now)
        self.assertEqual(first, second)
        self.assertEqual(len(reservations), 2)

    def test_week_grid_shape_and_states(self):
        reservations = [self._at(10, court="Q1"), self._at(10, court="Q2")]
        grid = build_week_grid(self.today, self.courts, reservations, self.now, 7, 22)
        self.assertEqual(len(grid), 16)
        self.assertTrue(all(len(row) == 7 for row in grid))

        ten = grid[3]
        self.assertEqual(ten[0].hour, "10:00")
        # Sunday..Tuesday before Wednesday 2026-03-11
        self.assertEqual([c.state for c in ten[:3]], [SlotState.PAST] * 3)
        wednesday = ten[3]
        self.assertEqual(wednesday.day, self.today)
        self.assertEqual(wednesday.available, 2)
        self.assertEqual(wednesday.free_court_ids, ["Q3", "Q4"])


class ReservationModelTests(TestCase):
    def setUp(self):
        self.owner = create_owner()
        self.court = create_court(self.owner)

    def _reservation(self, status=ReservationStatus.PENDING, hour=10):
        day = timezone.localdate() + timedelta(days=1)
        return Reservation.objects.create(
            owner=self.owner, court=self.court, starts_at=local_dt(day, hour), status=status,
        )

    def test_defaults(self):
        r = self._reservation()
        self.assertEqual(r.status, ReservationStatus.PENDING)
        self.assertEqual(r.payment_type, "undefined")
        self.assertEqual(r.display_client, "Unidentified client")

    def test_str(self):
        self.assertEqual(str(self.court), "Court 1 (futsal)")
        self.assertIn("Court 1 @", str(self._reservation()))

    def test_clean_rejects_off_grid_start(self):
        day = timezone.localdate() + timedelta(days=1)
        r = Reservation(owner=self.owner, court=self.court, starts_at=local_dt(day, 10, 15))
        with self.assertRaises(ValidationError):
            r.clean()

    def test_clean_rejects_foreign_court(self):
        other = create_owner()
        r = Reservation(owner=other, court=self.court, starts_at=local_dt(timezone.localdate(), 10))
        with self.assertRaises(ValidationError):
            r.clean()

    def test_allowed_transitions(self):
        r = self._reservation()
        self.assertTrue(r.can_transition_to(ReservationStatus.PAID))
        self.assertTrue(r.can_transition_to(ReservationStatus.CANCELED))
        self.assertFalse(r.can_transition_to(ReservationStatus.PENDING))
        r.transition_to(ReservationStatus.PAID)
        self.assertFalse(r.can_transition_to(ReservationStatus.PAID))
        r.transition_to(ReservationStatus.CANCELED)
        with self.assertRaises(InvalidTransition):
            r.transition_to(ReservationStatus.PAID)

    def test_database_blocks_double_booking(self):
        self._reservation()
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                self._reservation()

    def test_canceled_rows_do_not_block_database(self):
        self._reservation(status=ReservationStatus.CANCELED)
        self._reservation(status=ReservationStatus.CANCELED)
        self._reservation()
        self.assertEqual(Reservation.objects.count(), 3)


class ReservationServiceTests(TestCase):
    def setUp(self):
        self.owner = create_owner()
        self.court = create_court(self.owner, price="90.00")
        self.client_profile = create_client()
        self.tomorrow = timezone.localdate() + timedelta(days=1)

    def test_parse_slot(self):
        starts_at = parse_slot("2026-03-11", "08:00")
        self.assertTrue(timezone.is_aware(starts_at))
        self.assertEqual(timezone.localtime(starts_at).hour, 8)

    def test_parse_slot_rejects_garbage(self):
        for day, hour in [("bad", "08:00"), ("2026-03-11", "eight"), ("", ""), (None, None)]:
            with self.assertRaises(InvalidSlot):
                parse_slot(day, hour)

    def test_create_reservation_success(self):
        r = create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10), client=self.client_profile)
        self.assertEqual(r.status, ReservationStatus.PENDING)
        self.assertEqual(r.price, Decimal("90.00"))
        self.assertEqual(r.client_name, "Ana Souza")

    def test_create_reservation_conflict(self):
        create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10))
        with self.assertRaises(SlotUnavailable):
            create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10))

    def test_canceled_reservation_frees_the_slot(self):
        first = create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10))
        change_status(first, ReservationStatus.CANCELED)
        second = create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10))
        self.assertEqual(second.status, ReservationStatus.PENDING)

    def test_past_day_rejected(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        with self.assertRaises(PastSlot):
            create_reservation(self.owner, self.court.id, local_dt(yesterday, 10))

    def test_earlier_hour_today_accepted(self):
        today = timezone.localdate()
        now = local_dt(today, 21)
        r = create_reservation(self.owner, self.court.id, local_dt(today, 8), now=now)
        self.assertEqual(r.status, ReservationStatus.PENDING)

    def test_off_grid_start_rejected(self):
        with self.assertRaises(InvalidSlot):
            create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10, 30))

    def test_court_of_other_owner_rejected(self):
        other_court = create_court(create_owner())
        with self.assertRaises(CourtNotFound):
            create_reservation(self.owner, other_court.id, local_dt(self.tomorrow, 10))

    def test_inactive_or_unknown_court_rejected(self):
        inactive = create_court(self.owner, name="Old", is_active=False)
        with self.assertRaises(CourtNotFound):
            create_reservation(self.owner, inactive.id, local_dt(self.tomorrow, 10))
        with self.assertRaises(CourtNotFound):
            create_reservation(self.owner, "not-a-uuid", local_dt(self.tomorrow, 10))

    def test_integrity_error_reported_as_unavailable(self):
        with patch("booking.models.Reservation.objects.create") as mock_create:
            mock_create.side_effect = IntegrityError("duplicate")
            with self.assertRaises(SlotUnavailable):
                create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10))

    def test_change_status_flow(self):
        r = create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10))
        r = change_status(r, ReservationStatus.PAID)
        self.assertEqual(r.status, ReservationStatus.PAID)
        r = change_status(r, ReservationStatus.CANCELED)
        self.assertEqual(r.status, ReservationStatus.CANCELED)
        with self.assertRaises(InvalidTransition):
            change_status(r, ReservationStatus.PAID)
        r.refresh_from_db()
        self.assertEqual(r.status, ReservationStatus.CANCELED)

    def test_payment_type_recorded_when_paid(self):
        r = create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10))
        r = change_status(r, ReservationStatus.PAID, payment_type=PaymentType.PIX)
        self.assertEqual(r.payment_type, PaymentType.PIX)
        r = change_status(r, ReservationStatus.CANCELED, payment_type=PaymentType.CASH)
        self.assertEqual(r.payment_type, PaymentType.PIX)

    def test_unknown_payment_type_rejected(self):
        r = create_reservation(self.owner, self.court.id, local_dt(self.tomorrow, 10))
        with self.assertRaises(InvalidPaymentType):
            change_status(r, ReservationStatus.PAID, payment_type="bitcoin")
        r.refresh_from_db()
        self.assertEqual(r.status, ReservationStatus.PENDING)
        self.assertEqual(r.payment_type, PaymentType.UNDEFINED)


class BookingViewTests(TestCase):
    def setUp(self):
        self.api_client = APIClient()
        self.owner = create_owner()
        self.court_a = create_court(self.owner, name="Court 1")
        self.court_b = create_court(self.owner, name="Court 2", sport_type="volleyball", price="60.00")
        self.client_profile = create_client()
        self.tomorrow = timezone.localdate() + timedelta(days=1)

    def _login_client(self, client_profile=None):
        self.api_client.force_authenticate(user=(client_profile or self.client_profile).user)

    def _reserve(self, court=None, day=None, time="10:00"):
        data = {
            "court_id": str((court or self.court_a).id),
            "date": (day or self.tomorrow).isoformat(),
            "time": time,
        }
        return self.api_client.post(reverse("booking:reserve", args=[self.owner.id]), data, format="json")

    def test_public_court_list(self):
        create_court(self.owner, name="Hidden", is_active=False)
        res = self.api_client.get(reverse("booking:courts", args=[self.owner.id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["establishment"]["name"], self.owner.establishment_name)
        self.assertEqual([c["name"] for c in res.data["courts"]], ["Court 1", "Court 2"])

    def test_unknown_establishment(self):
        res = self.api_client.get(reverse("booking:week", args=[uuid4()]))
        self.assertEqual(res.status_code, 404)

    def test_week_shape(self):
        res = self.api_client.get(reverse("booking:week", args=[self.owner.id]), {"date": self.tomorrow.isoformat()})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["days"]), 7)
        self.assertEqual(len(res.data["hours"]), 16)
        self.assertEqual(len(res.data["grid"]), 16)
        self.assertIn(self.tomorrow.isoformat(), res.data["days"])

    def test_week_bad_date(self):
        res = self.api_client.get(reverse("booking:week", args=[self.owner.id]), {"date": "bad-date"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["detail"], "bad date")

    def test_week_rejects_dates_at_the_edge_of_the_calendar(self):
        for raw in ("0001-01-01", "9999-12-31"):
            with self.subTest(date=raw):
                res = self.api_client.get(reverse("booking:week", args=[self.owner.id]), {"date": raw})
                self.assertEqual(res.status_code, 400)
                self.assertEqual(res.data["detail"], "bad date")

    def test_week_ignores_reservations_on_deactivated_courts(self):
        Reservation.objects.create(owner=self.owner, court=self.court_b, starts_at=local_dt(self.tomorrow, 10))
        self.court_b.is_active = False
        self.court_b.save()

        res = self.api_client.get(reverse("booking:week", args=[self.owner.id]), {"date": self.tomorrow.isoformat()})
        cells = {(c["date"], c["hour"]): c for row in res.data["grid"] for c in row["cells"]}
        ten = cells[(self.tomorrow.isoformat(), "10:00")]
        self.assertEqual(ten["state"], "available")
        self.assertEqual(ten["available"], 1)
        self.assertEqual(ten["free_courts"], [str(self.court_a.id)])

    def test_week_reflects_reservations(self):
        Reservation.objects.create(owner=self.owner, court=self.court_a, starts_at=local_dt(self.tomorrow, 10))
        Reservation.objects.create(owner=self.owner, court=self.court_b, starts_at=local_dt(self.tomorrow, 11),
                                   status=ReservationStatus.CANCELED)
        res = self.api_client.get(reverse("booking:week", args=[self.owner.id]), {"date": self.tomorrow.isoformat()})
        cells = {(c["date"], c["hour"]): c for row in res.data["grid"] for c in row["cells"]}

        ten = cells[(self.tomorrow.isoformat(), "10:00")]
        self.assertEqual(ten["state"], "available")
        self.assertEqual(ten["available"], 1)
        self.assertEqual(ten["free_courts"], [str(self.court_b.id)])

        eleven = cells[(self.tomorrow.isoformat(), "11:00")]
        self.assertEqual(eleven["available"], 2)

    def test_week_full_cell(self):
        for court in (self.court_a, self.court_b):
            Reservation.objects.create(owner=self.owner, court=court, starts_at=local_dt(self.tomorrow, 19),
                                       status=ReservationStatus.PAID)
        res = self.api_client.get(reverse("booking:week", args=[self.owner.id]), {"date": self.tomorrow.isoformat()})
        cells = {(c["date"], c["hour"]): c for row in res.data["grid"] for c in row["cells"]}
        self.assertEqual(cells[(self.tomorrow.isoformat(), "19:00")]["state"], "full")

    def test_reserve_requires_login(self):
        res = self._reserve()
        self.assertIn(res.status_code, (401, 403))

    def test_reserve_requires_client_profile(self):
        self.api_client.force_authenticate(user=self.owner.user)
        res = self._reserve()
        self.assertEqual(res.status_code, 403)

    def test_reserve_success(self):
        self._login_client()
        res = self._reserve()
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["status"], "pending")
        self.assertEqual(res.data["client_name"], "Ana Souza")
        r = Reservation.objects.get(pk=res.data["id"])
        self.assertEqual(r.client, self.client_profile)
        self.assertEqual(timezone.localtime(r.starts_at).hour, 10)

    def test_reserve_conflict(self):
        self._login_client()
        self.assertEqual(self._reserve().status_code, 201)
        res = self._reserve()
        self.assertEqual(res.status_code, 409)

    def test_reserve_past_day(self):
        self._login_client()
        res = self._reserve(day=timezone.localdate() - timedelta(days=1))
        self.assertEqual(res.status_code, 400)

    def test_reserve_rejects_half_hour(self):
        self._login_client()
        res = self._reserve(time="10:30")
        self.assertEqual(res.status_code, 400)
        self.assertIn("time", res.data)

    def test_reserve_foreign_court(self):
        self._login_client()
        foreign = create_court(create_owner())
        res = self._reserve(court=foreign)
        self.assertEqual(res.status_code, 404)

    def test_reserve_write_failure_is_retryable(self):
        self._login_client()
        with patch("booking.views.create_reservation", side_effect=OperationalError("database is locked")):
            res = self._reserve()
        self.assertEqual(res.status_code, 503)
        self.assertTrue(res.data["retryable"])

    def test_my_reservations(self):
        self._login_client()
        self._reserve()
        res = self.api_client.get(reverse("booking:mine"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data), 1)
        self.assertEqual(res.data[0]["court_name"], "Court 1")

    def test_cancel_own_reservation(self):
        self._login_client()
        reservation_id = self._reserve().data["id"]
        res = self.api_client.post(reverse("booking:cancel", args=[reservation_id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(Reservation.objects.get(pk=reservation_id).status, ReservationStatus.CANCELED)

    def test_cancel_twice_conflicts(self):
        self._login_client()
        reservation_id = self._reserve().data["id"]
        self.api_client.post(reverse("booking:cancel", args=[reservation_id]))
        res = self.api_client.post(reverse("booking:cancel", args=[reservation_id]))
        self.assertEqual(res.status_code, 409)

    def test_cannot_cancel_started_reservation(self):
        r = Reservation.objects.create(
            owner=self.owner, court=self.court_a, client=self.client_profile,
            starts_at=local_dt(timezone.localdate() - timedelta(days=1), 10),
        )
        self._login_client()
        res = self.api_client.post(reverse("booking:cancel", args=[r.id]))
        self.assertEqual(res.status_code, 400)
        r.refresh_from_db()
        self.assertEqual(r.status, ReservationStatus.PENDING)

    def test_cannot_cancel_someone_elses(self):
        self._login_client()
        reservation_id = self._reserve().data["id"]
        self._login_client(create_client())
        res = self.api_client.post(reverse("booking:cancel", args=[reservation_id]))
        self.assertEqual(res.status_code, 404)


class ImportCourtsCommandTests(TestCase):
    def setUp(self):
        self.owner = create_owner(email="arena@example.com")

    def _write(self, payload):
        f = tempfile.NamedTemporaryFile("w", suffix=".json", delete=False, encoding="utf-8")
        json.dump(payload, f)
        f.close()
        return f.name

    def test_imports_and_updates(self):
        create_court(self.owner, name="Court 1", price="50.00")
        path = self._write([
            {"name": "Court 1", "sport_type": "futsal", "price_per_hour": "85.50"},
            {"name": "Beach Volley", "sport_type": "volleyball", "price_per_hour": 60},
            {"name": ""},
        ])
        call_command("import_courts", path, "--owner", "ARENA@example.com", stdout=StringIO())
        self.assertEqual(Court.objects.filter(owner=self.owner).count(), 2)
        self.assertEqual(Court.objects.get(owner=self.owner, name="Court 1").price_per_hour, Decimal("85.50"))

    def test_unknown_owner(self):
        path = self._write([])
        with self.assertRaises(CommandError):
            call_command("import_courts", path, "--owner", "nobody@example.com")

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("import_courts", "/nonexistent/courts.json", "--owner", "arena@example.com")


class HealthCheckTests(SimpleTestCase):
    def test_health(self):
        res = self.client.get(reverse("health"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "ok")
