from django.urls import path
from . import views

app_name = "booking"

urlpatterns = [
    path("<uuid:owner_id>/courts/", views.CourtListView.as_view(), name="courts"),
    path("<uuid:owner_id>/week/", views.WeekAvailabilityView.as_view(), name="week"),
    path("<uuid:owner_id>/reserve/", views.ReservationRequestView.as_view(), name="reserve"),
    path("mine/", views.MyReservationsView.as_view(), name="mine"),
    path("cancel/<uuid:pk>/", views.ReservationCancelView.as_view(), name="cancel"),
]
