import uuid
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Owner(models.Model):
    """
    Establishment owner. One per login; owns courts and receives reservations.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="owner_profile")
    name = models.CharField(max_length=120)
    establishment_name = models.CharField(max_length=160)
    city = models.CharField(max_length=120)
    phone = models.CharField(max_length=30)
    plan_type = models.CharField(max_length=30, default="monthly")
    court_count = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["establishment_name"]

    def __str__(self):
        return self.establishment_name

    @property
    def email(self):
        return self.user.email


class Client(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="client_profile")
    first_name = models.CharField(max_length=80)
    last_name = models.CharField(max_length=80, blank=True)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["first_name", "last_name"]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
