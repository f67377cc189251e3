# booking/serializers.py
import re
from django.utils import timezone
from rest_framework import serializers
from .models import Court, Reservation

HOUR_LABEL_RE = re.compile(r"^([01]\d|2[0-3]):00$")


class CourtSerializer(serializers.ModelSerializer):
    class Meta:
        model = Court
        fields = ["id", "name", "sport_type", "price_per_hour", "availability", "is_active"]
        read_only_fields = ["id"]


class ReservationSerializer(serializers.ModelSerializer):
    court_id = serializers.UUIDField(read_only=True)
    court_name = serializers.CharField(source="court.name", read_only=True)
    client_id = serializers.UUIDField(read_only=True, allow_null=True)
    client_name = serializers.CharField(source="display_client", read_only=True)
    establishment = serializers.CharField(source="owner.establishment_name", read_only=True)
    starts_at = serializers.SerializerMethodField()

    class Meta:
        model = Reservation
        fields = [
            "id", "court_id", "court_name", "client_id", "client_name", "establishment",
            "starts_at", "status", "payment_type", "price", "created_at",
        ]

    def get_starts_at(self, obj):
        return timezone.localtime(obj.starts_at).isoformat()


class ReservationRequestSerializer(serializers.Serializer):
    court_id = serializers.UUIDField()
    date = serializers.DateField()
    time = serializers.CharField()

    def validate_time(self, value):
        value = value.strip()
        if not HOUR_LABEL_RE.match(value):
            raise serializers.ValidationError("Use a whole hour label such as 08:00.")
        return value

