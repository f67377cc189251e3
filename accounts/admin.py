from django.contrib import admin
from .models import Owner, Client


@admin.register(Owner)
class OwnerAdmin(admin.ModelAdmin):
    list_display = ('establishment_name', 'name', 'city', 'phone', 'plan_type', 'court_count', 'created_at')
    list_filter = ('city', 'plan_type')
    search_fields = ('establishment_name', 'name', 'user__email')
    list_editable = ('plan_type',)


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'email', 'phone', 'created_at')
    search_fields = ('first_name', 'last_name', 'email')
