import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Count, Max, Q, Sum
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST, require_http_methods

from accounts.decorators import owner_required
from accounts.forms import error_dict
from accounts.models import Client
from booking.availability import reservations_at, slots_for_window, week_days
from booking.exceptions import BookingError
from booking.models import Court, Reservation, ReservationStatus
from booking.serializers import CourtSerializer, ReservationSerializer
from booking.services import create_reservation, change_status, parse_slot
from booking.views import RETRY_MESSAGE, parse_anchor, week_payload
from .forms import CourtForm, ProfileForm, EstablishmentForm, ManualReservationForm

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

STATUS_ACTIONS = {
    "paid": ReservationStatus.PAID,
    "canceled": ReservationStatus.CANCELED,
}


def _form_errors(form):
    return JsonResponse({"ok": False, "errors": error_dict(form)}, status=400)


def _bound_update(form_class, instance, data):
    """Binds ``form_class`` with the instance's current values overridden by ``data``."""
    initial = model_to_dict(instance, fields=form_class._meta.fields)
    initial.update({k: v for k, v in data.items() if k in form_class._meta.fields})
    return form_class(initial, instance=instance)


def _owner_payload(owner):
    return {
        "id": str(owner.id),
        "name": owner.name,
        "email": owner.email,
        "phone": owner.phone,
        "establishment_name": owner.establishment_name,
        "city": owner.city,
        "plan_type": owner.plan_type,
        "court_count": owner.court_count,
    }


@require_GET
@owner_required
def summary(request):
    owner = request.owner
    today = timezone.localdate()
    active = Reservation.objects.filter(owner=owner).exclude(status=ReservationStatus.CANCELED)

    today_qs = active.filter(starts_at__date=today)
    revenue_today = today_qs.filter(status=ReservationStatus.PAID).aggregate(total=Sum("price"))["total"] or Decimal("0")
    # SQLite drops the scale on aggregated decimals
    revenue_today = revenue_today.quantize(CENTS)

    days = week_days(today, settings.BOOKING_WEEK_START)
    week_count = active.filter(starts_at__date__gte=days[0], starts_at__date__lte=days[-1]).count()
    hours_per_day = len(slots_for_window(settings.BOOKING_OPEN_HOUR, settings.BOOKING_CLOSE_HOUR))
    capacity = len(days) * hours_per_day * Court.objects.filter(owner=owner, is_active=True).count()
    occupancy = min(round(week_count * 100 / capacity), 100) if capacity else 0

    recent = (Reservation.objects
              .filter(owner=owner)
              .select_related("court", "client", "owner")
              .order_by("-starts_at")[:settings.DASHBOARD_RECENT_LIMIT])

    return JsonResponse({
        "establishment": owner.establishment_name,
        "bookings_today": today_qs.count(),
        "revenue_today": str(revenue_today),
        "occupancy_this_week": occupancy,
        "recent_reservations": ReservationSerializer(recent, many=True).data,
    })


@require_GET
@owner_required
def agenda(request):
    owner = request.owner
    anchor = parse_anchor(request.GET.get("date"))
    if anchor is None:
        return JsonResponse({"detail": "bad date"}, status=400)

    courts = list(Court.objects.filter(owner=owner, is_active=True))
    days = week_days(anchor, settings.BOOKING_WEEK_START)
    reservations = list(
        Reservation.objects
        .filter(owner=owner, starts_at__date__gte=days[0], starts_at__date__lte=days[-1])
        .select_related("court", "client", "owner")
    )

    payload = week_payload(anchor, courts, reservations, timezone.now())
    rows = []
    for row in payload["grid"]:
        cells = []
        for slot in row:
            # canceled entries stay visible on the owner agenda
            shown = reservations_at(reservations, slot.day, slot.hour, include_canceled=True)
            cells.append({
                "date": slot.day.isoformat(),
                "hour": slot.hour,
                "state": slot.state.value,
                "available": slot.available,
                "reservations": ReservationSerializer(shown, many=True).data,
            })
        rows.append({"hour": row[0].hour, "cells": cells})
    payload["grid"] = rows
    payload["courts"] = CourtSerializer(courts, many=True).data
    return JsonResponse(payload)


@require_http_methods(["GET", "POST"])
@owner_required
def courts(request):
    owner = request.owner
    if request.method == "GET":
        qs = Court.objects.filter(owner=owner)
        return JsonResponse({"courts": CourtSerializer(qs, many=True).data})

    form = CourtForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    court = form.save(commit=False)
    court.owner = owner
    court.save()
    logger.info("Owner %s created court %s", owner.id, court.id)
    return JsonResponse({"ok": True, "court": CourtSerializer(court).data}, status=201)


@require_POST
@owner_required
def court_detail(request, pk):
    court = Court.objects.filter(pk=pk, owner=request.owner).first()
    if court is None:
        return JsonResponse({"detail": "court not found"}, status=404)

    form = _bound_update(CourtForm, court, request.POST)
    if not form.is_valid():
        return _form_errors(form)
    court = form.save()
    return JsonResponse({"ok": True, "court": CourtSerializer(court).data})


@require_POST
@owner_required
def reservations(request):
    owner = request.owner
    form = ManualReservationForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    data = form.cleaned_data

    try:
        starts_at = parse_slot(data["date"].isoformat(), data["time"])
        reservation = create_reservation(owner, data["court_id"], starts_at, client_name=data["client_name"])
    except BookingError as exc:
        return JsonResponse({"detail": exc.message}, status=exc.status_code)
    except DatabaseError:
        logger.exception("Manual reservation failed for owner %s", owner.id)
        return JsonResponse({"detail": RETRY_MESSAGE, "retryable": True}, status=503)

    return JsonResponse({"ok": True, "reservation": ReservationSerializer(reservation).data}, status=201)


@require_POST
@owner_required
def reservation_status(request, pk):
    reservation = Reservation.objects.filter(pk=pk, owner=request.owner).first()
    if reservation is None:
        return JsonResponse({"detail": "reservation not found"}, status=404)

    new_status = STATUS_ACTIONS.get((request.POST.get("status") or "").strip().lower())
    if new_status is None:
        return JsonResponse({"detail": "status must be 'paid' or 'canceled'"}, status=400)

    payment_type = (request.POST.get("payment_type") or "").strip().lower() or None
    try:
        reservation = change_status(reservation, new_status, payment_type=payment_type)
    except BookingError as exc:
        return JsonResponse({"detail": exc.message}, status=exc.status_code)

    return JsonResponse({
        "ok": True,
        "id": str(reservation.id),
        "status": reservation.status,
        "payment_type": reservation.payment_type,
    })


@require_GET
@owner_required
def clients(request):
    owner = request.owner
    now = timezone.now()
    active_since = now - timedelta(days=settings.ACTIVE_CLIENT_DAYS)

    qs = (Client.objects
          .filter(reservations__owner=owner)
          .annotate(reservation_count=Count("reservations"), last_reservation=Max("reservations__starts_at"))
          .order_by("first_name", "last_name"))

    q = (request.GET.get("q") or "").strip()
    if q:
        qs = qs.filter(Q(first_name__icontains=q) | Q(last_name__icontains=q) | Q(email__icontains=q))

    items = []
    active_count = 0
    for c in qs:
        is_active = c.last_reservation is not None and c.last_reservation > active_since
        active_count += int(is_active)
        items.append({
            "id": str(c.id),
            "name": c.full_name,
            "email": c.email,
            "phone": c.phone,
            "reservation_count": c.reservation_count,
            "last_reservation": timezone.localtime(c.last_reservation).isoformat() if c.last_reservation else None,
            "active": is_active,
        })

    return JsonResponse({
        "total_clients": len(items),
        "active_clients": active_count,
        "clients": items,
    })


@require_http_methods(["GET", "POST"])
@owner_required
def settings_view(request):
    owner = request.owner
    if request.method == "GET":
        return JsonResponse(_owner_payload(owner))

    section = (request.POST.get("section") or "").strip()
    form_class = {"profile": ProfileForm, "establishment": EstablishmentForm}.get(section)
    if form_class is None:
        return JsonResponse({"detail": "section must be 'profile' or 'establishment'"}, status=400)

    form = _bound_update(form_class, owner, request.POST)
    if not form.is_valid():
        return _form_errors(form)
    owner = form.save()
    logger.info("Owner %s updated %s settings", owner.id, section)
    return JsonResponse({"ok": True, "owner": _owner_payload(owner)})
