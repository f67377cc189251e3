import logging
from datetime import date, datetime, time as dtime
from uuid import UUID

from django.db import transaction, IntegrityError
from django.utils import timezone

from .availability import is_on_the_hour, is_slot_bookable
from .exceptions import InvalidSlot, PastSlot, CourtNotFound, SlotUnavailable, InvalidPaymentType
from .models import Court, PaymentType, Reservation, ReservationStatus

logger = logging.getLogger(__name__)


def parse_slot(day_str, hour_label):
    """Builds an aware start datetime from ``"YYYY-MM-DD"`` and ``"HH:00"``."""
    try:
        day = date.fromisoformat((day_str or "").strip())
        hh, mm = (hour_label or "").strip().split(":")
        start_time = dtime(int(hh), int(mm))
    except (TypeError, ValueError):
        raise InvalidSlot()
    return timezone.make_aware(datetime.combine(day, start_time), timezone.get_current_timezone())


@transaction.atomic
def create_reservation(owner, court_id, starts_at, client=None, client_name="", now=None):
    now = now or timezone.now()
    if timezone.is_naive(starts_at):
        starts_at = timezone.make_aware(starts_at, timezone.get_current_timezone())
    if not is_on_the_hour(starts_at):
        raise InvalidSlot("Reservations must start on the hour.")
    if not is_slot_bookable(starts_at, now):
        raise PastSlot()

    try:
        UUID(str(court_id))
    except ValueError:
        raise CourtNotFound()

    court = (Court.objects.select_for_update()
             .filter(pk=court_id, owner=owner, is_active=True)
             .first())
    if court is None:
        raise CourtNotFound()

    conflict = Reservation.objects.filter(
        court=court,
        starts_at=starts_at,
    ).exclude(status=ReservationStatus.CANCELED).exists()
    if conflict:
        raise SlotUnavailable()

    if client is not None and not client_name:
        client_name = client.full_name

    try:
        with transaction.atomic():
            reservation = Reservation.objects.create(
                owner=owner,
                court=court,
                client=client,
                client_name=client_name,
                starts_at=starts_at,
                status=ReservationStatus.PENDING,
                price=court.price_per_hour,
            )
    except IntegrityError:
        logger.warning("Concurrent reservation for court %s at %s", court.id, starts_at.isoformat())
        raise SlotUnavailable()

    logger.info("Reservation %s created for court %s at %s", reservation.id, court.id, starts_at.isoformat())
    return reservation


@transaction.atomic
def change_status(reservation, new_status, payment_type=None):
    """``payment_type`` is only recorded when the reservation is marked paid."""
    if payment_type is not None and payment_type not in PaymentType.values:
        raise InvalidPaymentType()

    reservation = Reservation.objects.select_for_update().get(pk=reservation.pk)
    previous = reservation.status
    reservation.transition_to(new_status)
    if new_status == ReservationStatus.PAID and payment_type:
        reservation.payment_type = payment_type
    reservation.save(update_fields=["status", "payment_type", "updated_at"])
    logger.info("Reservation %s: %s -> %s", reservation.id, previous, new_status)
    return reservation
