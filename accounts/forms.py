from django import forms
from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.db import transaction

from .models import Owner, Client

PASSWORD_MIN_LENGTH = 6
PHONE_MIN_LENGTH = 10


def _normalize_email(value):
    return (value or "").strip().lower()


class _SignUpBase(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(min_length=PASSWORD_MIN_LENGTH, widget=forms.PasswordInput)

    def clean_email(self):
        email = _normalize_email(self.cleaned_data["email"])
        if User.objects.filter(username=email).exists():
            raise forms.ValidationError("This e-mail is already in use. Try logging in.")
        return email

    def _create_user(self, first_name="", last_name=""):
        return User.objects.create_user(
            username=self.cleaned_data["email"],
            email=self.cleaned_data["email"],
            password=self.cleaned_data["password"],
            first_name=first_name[:150],
            last_name=last_name[:150],
        )


class OwnerSignUpForm(_SignUpBase):
    name = forms.CharField(max_length=120)
    establishment_name = forms.CharField(max_length=160)
    phone = forms.CharField(min_length=PHONE_MIN_LENGTH, max_length=30)
    city = forms.CharField(max_length=120)
    court_count = forms.IntegerField(min_value=1, initial=1)

    @transaction.atomic
    def save(self):
        data = self.cleaned_data
        user = self._create_user(first_name=data["name"])
        return Owner.objects.create(
            user=user,
            name=data["name"],
            establishment_name=data["establishment_name"],
            city=data["city"],
            phone=data["phone"],
            court_count=data["court_count"],
        )


class ClientSignUpForm(_SignUpBase):
    first_name = forms.CharField(max_length=80)
    last_name = forms.CharField(max_length=80)
    phone = forms.CharField(max_length=30, required=False)

    @transaction.atomic
    def save(self):
        data = self.cleaned_data
        user = self._create_user(first_name=data["first_name"], last_name=data["last_name"])
        return Client.objects.create(
            user=user,
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            phone=data.get("phone") or "",
        )


class EmailLoginForm(forms.Form):
    """Login by e-mail; the e-mail doubles as the Django username."""
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput)

    def __init__(self, request=None, *args, **kwargs):
        self.request = request
        self.user_cache = None
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned = super().clean()
        email = _normalize_email(cleaned.get("email"))
        password = cleaned.get("password")
        if email and password:
            self.user_cache = authenticate(self.request, username=email, password=password)
            if self.user_cache is None:
                raise forms.ValidationError("Invalid e-mail or password.", code="invalid_login")
            if not self.user_cache.is_active:
                raise forms.ValidationError("This account is disabled.", code="inactive")
        return cleaned

    def get_user(self):
        return self.user_cache


def error_dict(form):
    """``form.errors`` as plain lists of messages, ready for a JsonResponse."""
    return {field: [e["message"] for e in errors] for field, errors in form.errors.get_json_data().items()}
