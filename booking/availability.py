# booking/availability.py
"""
Weekly slot availability.

Every function here is pure: callers pass a snapshot of reservations (model
instances or any object exposing ``court_id``, ``starts_at`` and ``status``)
and get a classification back. Nothing is cached and the input is never
mutated, so one snapshot can be classified any number of times.

A slot is a ``(calendar day, "HH:00")`` cell of the booking grid. Canceled
reservations never occupy a slot.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence, Union

from django.utils import timezone

CANCELED = "canceled"
SUNDAY = 6


class SlotState(str, enum.Enum):
    PAST = "past"
    FULL = "full"
    AVAILABLE = "available"


@dataclass(frozen=True)
class SlotAvailability:
    day: date
    hour: str
    state: SlotState
    available: int
    free_court_ids: List = field(default_factory=list)
    reservations: List = field(default_factory=list)

    @property
    def is_bookable(self) -> bool:
        return self.state is SlotState.AVAILABLE


def _local(dt: datetime) -> datetime:
    if timezone.is_aware(dt):
        return timezone.localtime(dt)
    return dt


def _as_date(day: Union[date, datetime]) -> date:
    if isinstance(day, datetime):
        return _local(day).date()
    return day


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


def is_on_the_hour(dt: datetime) -> bool:
    local = _local(dt)
    return local.minute == 0 and local.second == 0 and local.microsecond == 0


def is_occupying(reservation) -> bool:
    return reservation.status != CANCELED


def slots_for_window(open_hour: int, close_hour: int) -> List[str]:
    """One label per hour from ``open_hour`` to ``close_hour``, both inclusive."""
    return [hour_label(h) for h in range(open_hour, close_hour + 1)]


def reservations_at(reservations: Iterable, day: Union[date, datetime], hour: str,
                    include_canceled: bool = False) -> list:
    """Reservations falling on ``day`` at ``hour``, in input order."""
    target = _as_date(day)
    matches = []
    for r in reservations:
        if not include_canceled and not is_occupying(r):
            continue
        start = _local(r.starts_at)
        if start.date() == target and start.strftime("%H:%M") == hour:
            matches.append(r)
    return matches


def is_slot_bookable(day: Union[date, datetime], now: datetime) -> bool:
    # Only the date is compared: hours already gone today stay bookable.
    return _as_date(day) >= _as_date(now)


def available_count(total_courts: Union[int, Sequence], booked: Iterable) -> int:
    """
    Courts still free in a slot. With a court sequence only reservations on
    those courts count, so bookings on courts outside the set (e.g.
    deactivated ones) take no capacity.
    """
    if not isinstance(total_courts, int):
        return len(free_courts(total_courts, booked))
    occupied = sum(1 for r in booked if is_occupying(r))
    return max(total_courts - occupied, 0)


def is_full(total_courts: Union[int, Sequence], booked: Iterable) -> bool:
    return available_count(total_courts, booked) == 0


def classify_slot(day, hour: str, reservations: Iterable, total_courts, now: datetime) -> SlotState:
    if not is_slot_bookable(day, now):
        return SlotState.PAST
    booked = reservations_at(reservations, day, hour)
    if available_count(total_courts, booked) == 0:
        return SlotState.FULL
    return SlotState.AVAILABLE


def free_courts(courts: Sequence, booked: Iterable) -> list:
    """Courts (in caller order) with no occupying reservation among ``booked``."""
    taken = {r.court_id for r in booked if is_occupying(r)}
    return [c for c in courts if c.id not in taken]


def resolve_slot(day, hour: str, reservations: Iterable, courts: Union[int, Sequence],
                 now: datetime) -> SlotAvailability:
    """
    Classify one cell and, when it is open, list the courts still free.

    ``courts`` may be a plain count; the free list is then empty since there
    are no identifiers to offer.
    """
    reservations = list(reservations)
    booked = reservations_at(reservations, day, hour)
    state = classify_slot(day, hour, reservations, courts, now)
    available = available_count(courts, booked)

    free_ids = []
    if state is SlotState.AVAILABLE and not isinstance(courts, int):
        free_ids = [c.id for c in free_courts(courts, booked)]

    return SlotAvailability(
        day=_as_date(day),
        hour=hour,
        state=state,
        available=available,
        free_court_ids=free_ids,
        reservations=booked,
    )


def week_days(anchor: Union[date, datetime], week_start: int = SUNDAY) -> List[date]:
    anchor = _as_date(anchor)
    offset = (anchor.weekday() - week_start) % 7
    start = anchor - timedelta(days=offset)
    return [start + timedelta(days=i) for i in range(7)]


def build_week_grid(anchor, courts: Sequence, reservations: Iterable, now: datetime,
                    open_hour: int, close_hour: int, week_start: int = SUNDAY) -> List[List[SlotAvailability]]:
    """Rows per hour label, columns per day of the week containing ``anchor``."""
    days = week_days(anchor, week_start)
    snapshot = list(reservations)
    return [
        [resolve_slot(day, hour, snapshot, courts, now) for day in days]
        for hour in slots_for_window(open_hour, close_hour)
    ]
