from django.contrib import admin
from .models import Court, Reservation


@admin.register(Court)
class CourtAdmin(admin.ModelAdmin):
    list_display = ('name', 'owner', 'sport_type', 'is_active', 'price_per_hour')
    list_filter = ('sport_type', 'is_active')
    search_fields = ('name', 'owner__establishment_name')
    list_editable = ('is_active', 'price_per_hour')


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ('id', 'owner', 'court', 'display_client', 'starts_at', 'status', 'price', 'created_at')
    list_filter = ('status', 'court__sport_type', 'created_at')
    search_fields = ('client_name', 'client__email', 'court__name')
    date_hierarchy = 'starts_at'
