import logging
from datetime import date

from django.conf import settings
from django.db import DatabaseError
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import views, permissions, status
from rest_framework.response import Response

from accounts.decorators import get_client
from accounts.models import Owner
from .availability import build_week_grid, week_days, slots_for_window
from .exceptions import BookingError
from .models import Court, Reservation, ReservationStatus
from .serializers import CourtSerializer, ReservationSerializer, ReservationRequestSerializer
from .services import create_reservation, change_status, parse_slot

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "Could not save your reservation. Please try again."


def booking_error_response(exc):
    return Response({"detail": exc.message}, status=exc.status_code)


def write_failure_response():
    return Response({"detail": RETRY_MESSAGE, "retryable": True}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


def parse_anchor(raw):
    """``?date=`` query value, defaulting to today; ``None`` when malformed."""
    if not raw:
        return timezone.localdate()
    try:
        anchor = date.fromisoformat(raw)
        # the whole week must fit in the date range
        week_days(anchor, settings.BOOKING_WEEK_START)
    except (ValueError, OverflowError):
        return None
    return anchor


def week_payload(anchor, courts, reservations, now):
    open_hour = settings.BOOKING_OPEN_HOUR
    close_hour = settings.BOOKING_CLOSE_HOUR
    week_start = settings.BOOKING_WEEK_START
    days = week_days(anchor, week_start)
    grid = build_week_grid(anchor, courts, reservations, now, open_hour, close_hour, week_start)
    return {
        "week_start": days[0].isoformat(),
        "week_end": days[-1].isoformat(),
        "days": [d.isoformat() for d in days],
        "hours": slots_for_window(open_hour, close_hour),
        "grid": grid,
    }


def _cell(slot):
    return {
        "date": slot.day.isoformat(),
        "hour": slot.hour,
        "state": slot.state.value,
        "available": slot.available,
        "free_courts": [str(cid) for cid in slot.free_court_ids],
    }


class CourtListView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, owner_id):
        owner = get_object_or_404(Owner, pk=owner_id)
        courts = Court.objects.filter(owner=owner, is_active=True)
        return Response({
            "establishment": {"id": str(owner.id), "name": owner.establishment_name, "city": owner.city},
            "courts": CourtSerializer(courts, many=True).data,
        })


class WeekAvailabilityView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, owner_id):
        owner = get_object_or_404(Owner, pk=owner_id)
        anchor = parse_anchor(request.query_params.get("date"))
        if anchor is None:
            return Response({"detail": "bad date"}, status=status.HTTP_400_BAD_REQUEST)

        courts = list(Court.objects.filter(owner=owner, is_active=True))
        days = week_days(anchor, settings.BOOKING_WEEK_START)
        reservations = list(
            Reservation.objects
            .filter(court__in=courts, starts_at__date__gte=days[0], starts_at__date__lte=days[-1])
            .exclude(status=ReservationStatus.CANCELED)
            .only("id", "court", "starts_at", "status")
        )

        payload = week_payload(anchor, courts, reservations, timezone.now())
        payload["grid"] = [
            {"hour": row[0].hour, "cells": [_cell(slot) for slot in row]}
            for row in payload["grid"]
        ]
        payload["establishment"] = {"id": str(owner.id), "name": owner.establishment_name}
        payload["courts"] = CourtSerializer(courts, many=True).data
        return Response(payload)


class ReservationRequestView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, owner_id):
        owner = get_object_or_404(Owner, pk=owner_id)
        client = get_client(request.user)
        if client is None:
            return Response({"detail": "client account required"}, status=status.HTTP_403_FORBIDDEN)

        serializer = ReservationRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        try:
            starts_at = parse_slot(data["date"].isoformat(), data["time"])
            reservation = create_reservation(owner, data["court_id"], starts_at, client=client)
        except BookingError as exc:
            return booking_error_response(exc)
        except DatabaseError:
            logger.exception("Reservation request failed for owner %s", owner.id)
            return write_failure_response()

        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class MyReservationsView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        client = get_client(request.user)
        if client is None:
            return Response([], status=200)
        qs = (Reservation.objects
              .filter(client=client)
              .select_related("court", "owner", "client")
              .order_by("-starts_at"))
        return Response(ReservationSerializer(qs, many=True).data, status=200)


class ReservationCancelView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        client = get_client(request.user)
        reservation = Reservation.objects.filter(pk=pk, client=client).first() if client else None
        if reservation is None:
            return Response({"detail": "reservation not found"}, status=status.HTTP_404_NOT_FOUND)
        if reservation.starts_at <= timezone.now():
            return Response({"detail": "Reservations that already started cannot be canceled."},
                            status=status.HTTP_400_BAD_REQUEST)

        try:
            reservation = change_status(reservation, ReservationStatus.CANCELED)
        except BookingError as exc:
            return booking_error_response(exc)

        return Response({"id": str(reservation.id), "status": reservation.status}, status=200)
