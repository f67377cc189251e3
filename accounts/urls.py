from django.urls import path
from . import views

app_name = "accounts"

urlpatterns = [
    path("signup/owner/", views.signup_owner, name="signup_owner"),
    path("signup/client/", views.signup_client, name="signup_client"),
    path("login/", views.login_ajax, name="login"),
    path("logout/", views.logout_ajax, name="logout"),
]
