import uuid
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounts.models import Owner, Client
from .availability import is_on_the_hour
from .exceptions import InvalidTransition


class Court(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(Owner, on_delete=models.CASCADE, related_name="courts")
    name = models.CharField(max_length=100)
    sport_type = models.CharField(max_length=50)
    price_per_hour = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    availability = models.CharField(max_length=120, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "name"]

    def __str__(self):
        return f"{self.name} ({self.sport_type})" if self.sport_type else self.name


class ReservationStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    CANCELED = "canceled", "Canceled"


class PaymentType(models.TextChoices):
    UNDEFINED = "undefined", "Not defined"
    PIX = "pix", "PIX"
    CARD = "card", "Card"
    CASH = "cash", "Cash"


# canceled is terminal
ALLOWED_TRANSITIONS = {
    ReservationStatus.PENDING: {ReservationStatus.PAID, ReservationStatus.CANCELED},
    ReservationStatus.PAID: {ReservationStatus.CANCELED},
    ReservationStatus.CANCELED: set(),
}


class Reservation(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(Owner, on_delete=models.CASCADE, related_name="reservations")
    court = models.ForeignKey(Court, on_delete=models.PROTECT, related_name="reservations")
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name="reservations")
    client_name = models.CharField(max_length=160, blank=True)
    starts_at = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=10, choices=ReservationStatus.choices, default=ReservationStatus.PENDING)
    payment_type = models.CharField(max_length=30, choices=PaymentType.choices, default=PaymentType.UNDEFINED)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["starts_at", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["court", "starts_at"],
                condition=~Q(status="canceled"),
                name="uniq_active_reservation_per_court_slot",
            ),
        ]

    def __str__(self):
        return f"{self.court.name} @ {self.starts_at:%Y-%m-%d %H:%M} [{self.status}]"

    @property
    def display_client(self):
        if self.client_id:
            return self.client.full_name
        return self.client_name or "Unidentified client"

    def clean(self):
        if self.starts_at and not is_on_the_hour(self.starts_at):
            raise ValidationError({"starts_at": "Reservations must start on the hour."})
        if self.court_id and self.owner_id and self.court.owner_id != self.owner_id:
            raise ValidationError({"court": "Court belongs to another establishment."})

    def can_transition_to(self, new_status):
        return new_status in ALLOWED_TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status):
        if not self.can_transition_to(new_status):
            raise InvalidTransition(f"Cannot change a {self.status} reservation to {new_status}.")
        self.status = new_status
