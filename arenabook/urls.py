from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include
from django.utils import timezone


def health(request):
    return JsonResponse({"status": "ok", "timestamp": timezone.now().isoformat()})


urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health, name="health"),
    path("accounts/", include(("accounts.urls", "accounts"), namespace="accounts")),
    path("booking/", include(("booking.urls", "booking"), namespace="booking")),
    path("dashboard/", include(("dashboard.urls", "dashboard"), namespace="dashboard")),
]
