from django.urls import path
from . import views

app_name = "dashboard"

urlpatterns = [
    path("", views.summary, name="summary"),
    path("agenda/", views.agenda, name="agenda"),
    path("courts/", views.courts, name="courts"),
    path("courts/<uuid:pk>/", views.court_detail, name="court_detail"),
    path("reservations/", views.reservations, name="reservations"),
    path("reservations/<uuid:pk>/status/", views.reservation_status, name="reservation_status"),
    path("clients/", views.clients, name="clients"),
    path("settings/", views.settings_view, name="settings"),
]
